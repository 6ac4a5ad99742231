from rest_framework.authentication import TokenAuthentication


class BearerTokenAuthentication(TokenAuthentication):
    """
    DRF token auth read from `Authorization: Bearer <token>`,
    the header the frontend API client sends.
    """
    keyword = "Bearer"
