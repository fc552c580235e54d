"""Domain errors raised by the core and translated to HTTP status codes by the app."""


class GameError(Exception):
    """Base class for all game errors."""


class NotFoundError(GameError):
    """A referenced save, nation, chat, action, unit or event does not exist."""


class SaveNotFound(NotFoundError):
    def __init__(self, save_id: str) -> None:
        super().__init__(f"Save {save_id} not found")
        self.save_id = save_id


class NationNotFound(NotFoundError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Nation {code} not found")
        self.code = code


class ChatNotFound(NotFoundError):
    def __init__(self, chat_id: str) -> None:
        super().__init__(f"Chat {chat_id} not found")


class ActionNotFound(NotFoundError):
    def __init__(self, action_id: str) -> None:
        super().__init__(f"Action {action_id} not found or already processed")


class UnitNotFound(NotFoundError):
    def __init__(self, unit_id: str) -> None:
        super().__init__(f"Unit {unit_id} not found")


class EventNotFound(NotFoundError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event {event_id} not found")


class GameValidationError(GameError):
    """Request input is present but unusable (e.g. a malformed start date)."""
