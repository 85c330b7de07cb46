"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold logic that spans several entities or repositories
    (provisioning a user together with its linked account, for instance).
    """

    pass
