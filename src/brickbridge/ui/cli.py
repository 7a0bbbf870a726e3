from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from brickbridge.app import get_inventory_rows, run_matching_pass
from brickbridge.config import configure_logging
from brickbridge.domain.errors import InventoryUnavailableError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from brickbridge.domain.outcomes import InventoryResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Cross-catalog minifigure matching and inventories"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("match", help="Run a matching pass over stored container data")

    inventory = subparsers.add_parser("inventory", help="Materialize a container's inventory")
    inventory.add_argument(
        "container_id", type=str, help="Container (set) identifier, e.g. 75192-1"
    )
    inventory.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Print rows as JSON lines instead of a table",
    )

    return parser.parse_args(list(argv))


def _print_inventory(result: InventoryResult, *, as_json: bool) -> None:
    for row in result.rows:
        if as_json:
            print(
                json.dumps(
                    {
                        "key": row.canonical_key,
                        "type": row.row_type,
                        "name": row.name,
                        "quantity": row.quantity_required,
                        "parents": [
                            {"key": rel.parent_key, "quantity": rel.quantity}
                            for rel in row.parent_relations
                        ],
                        "components": [
                            {"key": rel.child_key, "quantity": rel.quantity}
                            for rel in row.component_relations
                        ],
                    }
                )
            )
        else:
            print(f"{row.quantity_required:>5}  {row.canonical_key:<40} {row.name or ''}")
    if result.minifig_meta is not None:
        log.info(
            "Minifigs: total=%d, self_heal_attempted=%d, self_heal_failed=%d",
            result.minifig_meta.total_minifigs,
            result.minifig_meta.self_heal_attempted,
            result.minifig_meta.self_heal_failed,
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "match":
            report = run_matching_pass()
            log.info(
                "Matching finished: new=%d (elimination=%d, fingerprint=%d), unmatched=%d",
                len(report.records),
                report.tier_one,
                report.tier_two,
                report.unmatched,
            )
        elif parsed_args.command == "inventory":
            result = get_inventory_rows(parsed_args.container_id)
            _print_inventory(result, as_json=parsed_args.as_json)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except InventoryUnavailableError:
        log.exception("Inventory unavailable")
        sys.exit(3)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
