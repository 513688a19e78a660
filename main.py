"""Sahulat AI - CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv


def setup_logging(log_level: str = "INFO") -> None:
    """Configure logging to both console and log file."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    run_date = datetime.now().strftime("%Y-%m-%d")
    log_file = log_dir / f"chat_{run_date}.log"

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def main() -> None:
    """Main CLI entrypoint: answer one message and print the response as JSON."""
    parser = argparse.ArgumentParser(
        description="Sahulat AI - government program discovery assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py "I am 25 years old, live in Lahore, looking for scholarship"
  python main.py "میری عمر 30 ہے اور مجھے قرضہ چاہیے" --locale ur
  python main.py "I need a business loan" --profile profile.json
  python main.py "any housing schemes?" --tier smart --no-log
  python main.py "I need a business loan" --profile profile.json --enhance
  python main.py "What is the Ehsaas programme?" --simple
        """,
    )
    parser.add_argument("message", help="The user's message")
    parser.add_argument(
        "--locale",
        choices=["en", "ur"],
        default=None,
        help="Message locale. Default: detected from the text",
    )
    parser.add_argument(
        "--profile",
        default=None,
        help="Path to a JSON user profile; created or updated after the turn",
    )
    parser.add_argument(
        "--programs",
        default=None,
        help="Path to programs YAML. Default: $PROGRAMS_PATH or programs.yaml",
    )
    parser.add_argument(
        "--tier",
        default=None,
        help="Model tier (chat, fast, creative, smart, programming). Default: $MODEL_TIER",
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        help="Do not record the exchange in the chat log database",
    )
    parser.add_argument(
        "--enhance",
        action="store_true",
        help="Also ask the completion service to fill in missing profile fields",
    )
    parser.add_argument(
        "--simple",
        action="store_true",
        help="Print a short free-form answer instead of recommendations",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override (DEBUG, INFO, WARNING, ERROR)",
    )

    args = parser.parse_args()

    # Load environment variables
    load_dotenv()

    from sahulat.config import load_settings

    settings = load_settings()
    setup_logging(args.log_level or settings.log_level)
    logger = logging.getLogger("sahulat")

    if args.simple:
        from sahulat.agents.assistant import generate_simple_response

        print(generate_simple_response(args.message, settings))
        return

    from sahulat.agents.chat import handle_chat
    from sahulat.models.profile import UserProfile
    from sahulat.storage.database import ChatLogRepository
    from sahulat.storage.program_store import ProgramStore

    profile = None
    profile_path = Path(args.profile) if args.profile else None
    if profile_path and profile_path.exists():
        profile = UserProfile.model_validate_json(profile_path.read_text(encoding="utf-8"))
        logger.info("Loaded profile %s from %s", profile.id, profile_path)

    store = ProgramStore.from_yaml(args.programs or settings.programs_path)
    chat_log = None if args.no_log else ChatLogRepository(settings.chat_db_path)

    try:
        response = handle_chat(
            args.message,
            profile,
            store.get_all_programs(),
            settings=settings,
            locale=args.locale,
            tier=args.tier,
            chat_log=chat_log,
            enhance_profile=args.enhance,
        )
    except Exception as e:
        logger.error("Chat turn failed: %s", e, exc_info=True)
        sys.exit(1)
    finally:
        if chat_log is not None:
            chat_log.close()

    if profile_path and response.profile is not None:
        profile_path.write_text(response.profile.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Saved profile %s to %s", response.profile.id, profile_path)

    print(response.model_dump_json(indent=2, exclude={"profile"}))
    if not response.success:
        sys.exit(2)


if __name__ == "__main__":
    main()
