import argparse
import sys

from advisor.allocation_service import build_service
from advisor.exceptions import InvalidProfileError, NotFoundError, StorageError
from advisor.report import AllocationReport


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute or show an investor portfolio allocation."
    )
    parser.add_argument("--store", help="path of the allocation file")
    parser.add_argument("--method", choices=("banded", "blended"),
                        help="template method (default from config)")
    sub = parser.add_subparsers(dest="command", required=True)

    compute = sub.add_parser("compute", help="compute and store a new allocation")
    compute.add_argument("--risk", required=True, help="Low, Medium or High")
    compute.add_argument("--horizon", required=True, type=int, help="years, 1-30")
    compute.add_argument("--age", required=True, type=int, help="18-100")
    compute.add_argument("--goal", required=True, help="e.g. retirement")
    compute.add_argument("--target", required=True, help="target amount")

    sub.add_parser("last", help="show the last stored allocation")
    return parser


def main(argv=None) -> int:
    args = _parser().parse_args(argv)
    service = build_service(store_path=args.store, method=args.method)

    try:
        if args.command == "compute":
            raw = {
                "riskTolerance":          args.risk,
                "investmentHorizonYears": args.horizon,
                "age":                    args.age,
                "goal":                   args.goal,
                "targetAmount":           args.target,
            }
            result = service.compute_and_store(raw)
            print(AllocationReport.render(result, profile=service.last_profile))
        else:
            result = service.load_last()
            print(AllocationReport.render(result))
    except InvalidProfileError as exc:
        print(f"Invalid profile: {exc}", file=sys.stderr)
        return 2
    except NotFoundError as exc:
        print(f"Nothing stored yet: {exc}", file=sys.stderr)
        return 1
    except StorageError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
