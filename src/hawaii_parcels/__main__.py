import argparse
import json
import logging

from .aggregator import DEFAULT_MIN_VALUE
from .client import ParcelQueryClient
from .resolver import DEFAULT_RADIUS
from .service import HawaiiParcelService
from .settings import get_settings


def _print_json(payload):
    print(json.dumps(payload, ensure_ascii=False))


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="hawaii_parcels",
        description="Hawaii statewide parcel lookup and enrichment CLI",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, etc.)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit one JSON log line per jurisdiction (luxury only)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--layer-url",
        default=None,
        help="Parcels FeatureServer layer URL",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    enrich = sub.add_parser("enrich", help="Resolve a coordinate to its parcel")
    enrich.add_argument("--lat", type=float, required=True)
    enrich.add_argument("--lng", type=float, required=True)
    enrich.add_argument("--radius", type=float, default=DEFAULT_RADIUS)

    tmk = sub.add_parser("tmk", help="Look up a parcel by Tax Map Key")
    tmk.add_argument("tmk")

    bounds = sub.add_parser("bounds", help="List parcels intersecting an envelope")
    bounds.add_argument("--min-lat", type=float, required=True)
    bounds.add_argument("--max-lat", type=float, required=True)
    bounds.add_argument("--min-lng", type=float, required=True)
    bounds.add_argument("--max-lng", type=float, required=True)
    bounds.add_argument("--county", default=None)

    luxury = sub.add_parser("luxury", help="High-value parcels across all counties")
    luxury.add_argument("--min-value", type=float, default=DEFAULT_MIN_VALUE)
    return parser


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = get_settings()
    client = ParcelQueryClient(
        layer_url=args.layer_url or settings.parcels_layer_url,
        timeout_s=args.timeout if args.timeout is not None else settings.timeout_s,
        user_agent=settings.user_agent,
    )
    service = HawaiiParcelService(client=client, settings=settings)

    try:
        if args.command == "enrich":
            try:
                record = service.enrich(args.lat, args.lng, args.radius)
            except ValueError as exc:
                parser.error(str(exc))
            _print_json(record.to_dict() if record else None)
        elif args.command == "tmk":
            parcel = service.query_by_tmk(args.tmk)
            _print_json(parcel.to_dict() if parcel else None)
        elif args.command == "bounds":
            try:
                parcels = service.query_by_bounds(
                    args.min_lat,
                    args.max_lat,
                    args.min_lng,
                    args.max_lng,
                    county=args.county,
                )
            except ValueError as exc:
                parser.error(str(exc))
            _print_json([p.to_dict() for p in parcels])
        elif args.command == "luxury":
            report = service.high_value_report(args.min_value)
            if args.log_json:
                for outcome in report.outcomes:
                    _print_json(outcome.to_dict())
            _print_json([r.to_dict() for r in report.records])
            summary = {
                "total_counties": len(report.outcomes),
                "succeeded": sum(1 for o in report.outcomes if o.status != "failed"),
                "failed": len(report.failed),
                "total_items": len(report.records),
            }
            _print_json(summary)
    finally:
        client.close()


def _safe_main():
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:
        print(json.dumps({"error": str(exc)}))
        raise SystemExit(1)


if __name__ == "__main__":
    _safe_main()
