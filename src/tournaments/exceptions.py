class TournamentError(Exception):
    """Base class for tournament engine errors."""


class ValidationError(TournamentError):
    """Bad creation input: roster size, parity, unsupported type/format."""


class PermissionDenied(TournamentError):
    def __init__(self, user_id: str, action: str):
        self.user_id = user_id
        self.action = action
        super().__init__(f"User {user_id!r} is not allowed to {action.replace('_', ' ')}")


class TournamentNotFound(TournamentError):
    def __init__(self, tournament_id: str):
        self.tournament_id = tournament_id
        super().__init__(f"Tournament {tournament_id} not found")


class StorageError(TournamentError):
    """The atomic batch write or delete failed and was rolled back."""
