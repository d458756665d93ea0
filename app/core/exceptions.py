"""
Service-level exceptions
"""


class PreconditionError(ValueError):
    """The job is not in a state that allows the requested operation.

    Raised before anything is written, so the stored job is unchanged.
    """


class CollaboratorError(RuntimeError):
    """An external collaborator (SMS, document, file store) failed.

    Any job mutation persisted before the failure is kept.
    """
