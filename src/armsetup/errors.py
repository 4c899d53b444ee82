"""Fatal error taxonomy. Detection problems are warnings, not exceptions."""


class SetupError(Exception):
    """A fatal failure in one pipeline stage."""

    stage = "setup"

    def __init__(self, message: str, stage: str = "") -> None:
        super().__init__(message)
        if stage:
            self.stage = stage


class PrivilegeError(SetupError):
    stage = "preflight"


class ProvisioningError(SetupError):
    stage = "provision"


class PullError(SetupError):
    stage = "pull"
