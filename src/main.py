from src.app import AppSettings, bootstrap
from src.learning import LearningCore

__all__ = ["main", "LearningCore"]


def main() -> None:
    """Entry point: apply migrations and verify the services can be built."""
    settings = AppSettings.from_env()
    bootstrap(settings)


if __name__ == "__main__":
    main()
