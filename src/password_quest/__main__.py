from pathlib import Path
import logging
import os
import sys

from dotenv import load_dotenv

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from password_quest.application.services.event_bus import EventBus
from password_quest.bootstrap import create_boss_fight
from password_quest.domain.errors import DifficultyConfigurationError
from password_quest.presentation.boss_fight_ui import BossFightPresenter, run_boss_fight

load_dotenv()


def _print_help_surface() -> None:
    print("\nHelp:")
    print("- In the fight: a to cast a spell, w/j to jump, l/r to dodge, ENTER to wait, q to quit.")
    print("- Difficulty: set PQ_DIFFICULTY to easy, medium or hard.")
    print("- Stage results: PQ_LEVEL1_COINS, PQ_LEVEL2_COINS and PQ_LEVEL2_ALERTS must be whole numbers.")


def _configure_logging() -> None:
    level_name = os.getenv("PQ_LOG_LEVEL", "WARNING").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    _configure_logging()
    try:
        event_bus = EventBus()
        controller = create_boss_fight(event_bus=event_bus)
        presenter = BossFightPresenter(event_bus)
        record = run_boss_fight(controller, presenter)
        if record is None:
            print("\nSession ended.")
    except KeyboardInterrupt:
        print("\nSession ended.")
    except DifficultyConfigurationError as exc:
        print("The boss fight could not start.")
        print(f"Reason: {exc}")
        _print_help_surface()
    except Exception as exc:
        print("An unexpected error occurred. The game closed safely.")
        print(f"Reason: {exc}")
        _print_help_surface()


if __name__ == "__main__":
    main()
