from abc import ABC, abstractmethod

from teamboard.models import GameListItem, GameSession, Photo, TaskDefinition, TeamResult


class BaseSource(ABC):
    """Abstract base class for quiz result sources."""

    @abstractmethod
    async def fetch_games(self) -> list[GameListItem]:
        """Fetches the game catalog visible to the credential.

        Returns:
            A list of GameListItem objects, possibly empty.
        """
        pass

    @abstractmethod
    async def fetch_game_info(self, game_id: str) -> GameSession:
        """Fetches game metadata.

        Args:
            game_id: The game identifier.

        Returns:
            The GameSession; degrades to one named after the id.
        """
        pass

    @abstractmethod
    async def fetch_tasks(self, game_id: str) -> list[TaskDefinition]:
        """Fetches the authoritative task catalog (may be empty)."""
        pass

    @abstractmethod
    async def fetch_results(self, game_id: str) -> list[TeamResult]:
        """Fetches the current ranked results snapshot.

        Raises:
            ResultsUnavailableError: If no endpoint answered.
        """
        pass

    @abstractmethod
    async def fetch_photos(
        self,
        game_id: str,
        results: list[TeamResult] | None = None,
        tasks: list[TaskDefinition] | None = None,
    ) -> list[Photo]:
        """Fetches the deduplicated photo gallery."""
        pass

    async def aclose(self) -> None:
        """Releases network resources held by the source."""
