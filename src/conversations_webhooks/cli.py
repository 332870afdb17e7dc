from __future__ import annotations

import argparse
import json
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from .errors import ResourceError
from .lifecycle import ApplyResult, apply_config, destroy, import_resource, refresh
from .logging_config import setup_logging
from .resource import AddressConfigurationWebhookResource
from .schema import AddressConfigurationWebhookConfig
from .state import SessionLocal, init_db, list_states, load_state


def _print_result(name: str, result: ApplyResult) -> None:
    print(
        json.dumps(
            {
                "name": name,
                "action": result.action,
                "state": result.state.model_dump() if result.state else None,
            },
            indent=2,
        )
    )


def _load_config(path: str) -> AddressConfigurationWebhookConfig:
    return AddressConfigurationWebhookConfig.model_validate_json(
        Path(path).read_text(encoding="utf-8")
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conversations-webhooks",
        description="Manage Twilio Conversations address configuration webhooks.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (e.g. DEBUG).")
    sub = parser.add_subparsers(dest="command", required=True)

    p_apply = sub.add_parser("apply", help="Create, update or replace from a JSON config file.")
    p_apply.add_argument("name")
    p_apply.add_argument("config", help="Path to a JSON file with the resource attributes.")

    p_show = sub.add_parser("show", help="Print the stored state.")
    p_show.add_argument("name")

    sub.add_parser("list", help="List stored resources.")

    p_refresh = sub.add_parser("refresh", help="Re-read the remote resource into state.")
    p_refresh.add_argument("name")

    p_destroy = sub.add_parser("destroy", help="Delete the remote resource and its state.")
    p_destroy.add_argument("name")

    p_import = sub.add_parser("import", help="Adopt an existing address configuration.")
    p_import.add_argument("name")
    p_import.add_argument("id", help="ID containing /Configuration/Addresses/<sid>.")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    resource = AddressConfigurationWebhookResource()
    db = SessionLocal()
    try:
        init_db()
        if args.command == "apply":
            _print_result(args.name, apply_config(db, resource, args.name, _load_config(args.config)))
        elif args.command == "show":
            state = load_state(db, args.name)
            if state is None:
                raise ResourceError(f"No state stored for {args.name}")
            print(json.dumps(state.model_dump(), indent=2))
        elif args.command == "list":
            print(
                json.dumps(
                    [{"name": name, "state": state.model_dump()} for name, state in list_states(db)],
                    indent=2,
                )
            )
        elif args.command == "refresh":
            _print_result(args.name, refresh(db, resource, args.name))
        elif args.command == "destroy":
            _print_result(args.name, destroy(db, resource, args.name))
        elif args.command == "import":
            _print_result(args.name, import_resource(db, resource, args.name, args.id))
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}")
        raise SystemExit(1) from exc
    except SQLAlchemyError as exc:
        print(f"State database error: {exc}")
        raise SystemExit(1) from exc
    except (ResourceError, RuntimeError, OSError) as exc:
        print(f"Error: {exc}")
        raise SystemExit(1) from exc
    finally:
        db.close()


if __name__ == "__main__":
    main()
