"""Status lifecycle exceptions."""

from app.exceptions.crud import ValidationError


class InvalidStatusTransitionError(ValidationError):
    """Requested status is unknown or not reachable from the current status."""

    def __init__(self, resource: str, current: str, target: str):
        """
        Build the error for a rejected `current -> target` transition.

        Parameters:
            resource (str): Name of the entity type (for example, "Opportunity").
            current (str): Status the entity is currently in.
            target (str): Status that was requested.
        """
        self.resource = resource
        self.current = current
        self.target = target
        super().__init__(
            f"{resource} cannot move from {current} to {target}", field="status"
        )


class ReasonRequiredError(ValidationError):
    """Transition needs a non-empty reason and none was supplied."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(
            f"A reason is required to change status from {current} to {target}",
            field="reason",
        )
