"""Command-line interface for GuestPulse."""

import argparse
import json
import logging
import sys

from .core.config import settings
from .core.constants import FileConstants
from .core.errors import GuestPulseError
from .core.models import DateRange, FilterSpec
from .core.sorting import SORT_DIRECTIONS, SORT_KEYS
from .core.stats import category_breakdown, compute_stats
from .services.review_service import ReviewService, build_review_service
from .utils.data_prep import error_envelope, export_to_csv, export_to_json, success_envelope

logger = logging.getLogger(__name__)


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=FileConstants.LOG_FORMAT
    )


def build_filter_spec(args) -> FilterSpec:
    """Translate filter flags into a FilterSpec."""
    params = {
        "rating": args.rating,
        "channel": args.channel,
        "category": args.category,
        "isApproved": args.approved,
        "searchTerm": args.search,
    }
    spec = FilterSpec.from_params(params)
    if args.start_date or args.end_date:
        # A half-open range on the command line means "from/until forever"
        spec.date_range = DateRange(start=args.start_date or "0001-01-01", end=args.end_date or "9999-12-31")
    return spec


def _print_reviews(reviews):
    for review in reviews:
        status = "approved" if review.is_approved else "pending"
        shown = ", shown" if review.is_displayed else ""
        print(f"  [{review.id}] {review.rating}/5 {review.guest_name} @ {review.listing_name} "
              f"({review.channel.value}, {review.category.value}, {status}{shown})")
        if review.comment:
            print(f"      {review.comment[:100]}")


def cmd_reviews(args, service: ReviewService):
    """Reviews command."""
    spec = build_filter_spec(args)
    listing = service.get_aggregated_reviews(spec, args.sort, args.direction)

    if args.out:
        meta = {"degraded": listing.degraded, "errors": listing.errors, "filters": spec.to_dict()}
        export_to_json(success_envelope(listing.to_dict(), meta), args.out)
        print(f"Results exported to {args.out}")
        return

    print(f"Showing {listing.total} of {listing.original_total} reviews")
    if listing.degraded:
        print(f"⚠️  Degraded data: {listing.errors}")
    _print_reviews(listing.reviews)


def cmd_stats(args, service: ReviewService):
    """Stats command."""
    listing = service.get_aggregated_reviews(build_filter_spec(args))
    stats = listing.stats

    print(f"Total reviews: {stats.total_reviews}")
    print(f"Average rating: {stats.average_rating:.1f}/5")
    print("Rating distribution:")
    for rating, count in stats.rating_distribution.items():
        print(f"  {rating}★ {count}")
    print("Channels:")
    for channel, count in stats.channel_breakdown.items():
        print(f"  {channel}: {count}")
    print("Category averages:")
    for category, average in stats.category_averages.items():
        print(f"  {category}: {average:.1f}/5")
    print("Monthly trends:")
    for trend in stats.monthly_trends:
        print(f"  {trend.month}: {trend.count} reviews, {trend.average_rating:.1f}/5")


def cmd_export(args, service: ReviewService):
    """Export command."""
    listing = service.get_aggregated_reviews(build_filter_spec(args), args.sort, args.direction)
    export_to_csv(listing.reviews, args.out)
    print(f"Exported {listing.total} reviews to {args.out}")


def cmd_property(args, service: ReviewService):
    """Public property view command."""
    reviews = service.public_reviews(args.listing_id, rating=args.rating_value, category=args.category_value)
    print(f"{len(reviews)} published reviews for listing {args.listing_id}")
    if reviews:
        stats = compute_stats(reviews)
        print(f"Average rating: {stats.average_rating:.1f}/5")
        print("Rating distribution: " + ", ".join(
            f"{rating}★ {count}" for rating, count in stats.rating_distribution.items()))
        print("Categories: " + ", ".join(
            f"{category} {count}" for category, count in sorted(category_breakdown(reviews).items())))
    _print_reviews(reviews)


def cmd_google(args, service: ReviewService):
    """Google reviews command."""
    result = service.google_reviews(args.property_id)

    if args.out:
        export_to_json(success_envelope(result.to_dict()), args.out)
        print(f"Results exported to {args.out}")
        return

    if not result.configuration.get("isConfigured"):
        print("Google Places API is not configured")
        for requirement in result.configuration.get("requirements", []):
            print(f"  - {requirement}")
        return

    print(f"{len(result.reviews)} Google reviews for {result.property.name}")
    _print_reviews(result.reviews)


def cmd_test_connection(args, service: ReviewService):
    """Connectivity test command."""
    results = service.test_source_connectivity()
    print(json.dumps({name: result.to_dict() for name, result in results.items()}, indent=2))


def _add_filter_arguments(parser):
    parser.add_argument('--rating', help='Comma separated ratings, e.g. 4,5')
    parser.add_argument('--channel', help='Comma separated channels')
    parser.add_argument('--category', help='Comma separated categories')
    parser.add_argument('--approved', choices=['true', 'false'], help='Approval status')
    parser.add_argument('--search', help='Free-text search term')
    parser.add_argument('--start-date', help='Inclusive range start (ISO-8601)')
    parser.add_argument('--end-date', help='Inclusive range end (ISO-8601)')


def _add_sort_arguments(parser):
    parser.add_argument('--sort', default='date', choices=list(SORT_KEYS), help='Sort field')
    parser.add_argument('--direction', default='desc', choices=list(SORT_DIRECTIONS), help='Sort direction')


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="GuestPulse - Guest Review Aggregation")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Reviews command
    reviews_parser = subparsers.add_parser('reviews', help='List aggregated reviews')
    _add_filter_arguments(reviews_parser)
    _add_sort_arguments(reviews_parser)
    reviews_parser.add_argument('--out', help='Output JSON file')

    # Stats command
    stats_parser = subparsers.add_parser('stats', help='Show review statistics')
    _add_filter_arguments(stats_parser)

    # Export command
    export_parser = subparsers.add_parser('export', help='Export reviews to CSV')
    _add_filter_arguments(export_parser)
    _add_sort_arguments(export_parser)
    export_parser.add_argument('--out', required=True, help='Output CSV file')

    # Property command
    property_parser = subparsers.add_parser('property', help='Show published reviews for a listing')
    property_parser.add_argument('listing_id', help='Listing ID')
    property_parser.add_argument('--rating', dest='rating_value', type=int, help='Only this rating')
    property_parser.add_argument('--category', dest='category_value', help='Only this category')

    # Google command
    google_parser = subparsers.add_parser('google', help='Fetch live Google reviews for a property')
    google_parser.add_argument('property_id', help='Property ID from the catalog')
    google_parser.add_argument('--out', help='Output JSON file')

    # Connectivity command
    subparsers.add_parser('test-connection', help='Test upstream source connectivity')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    setup_logging()
    commands = {
        'reviews': cmd_reviews,
        'stats': cmd_stats,
        'export': cmd_export,
        'property': cmd_property,
        'google': cmd_google,
        'test-connection': cmd_test_connection,
    }

    try:
        service = build_review_service(settings)
        commands[args.command](args, service)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
    except GuestPulseError as e:
        logger.error(f"Command failed: {e}")
        print(json.dumps(error_envelope(e), indent=2))
        sys.exit(1)
    except Exception as e:
        print(json.dumps(error_envelope(e), indent=2))
        sys.exit(1)


if __name__ == "__main__":
    main()
