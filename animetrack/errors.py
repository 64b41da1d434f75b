"""
Domain errors raised by the service layer.
Each error carries the HTTP status and code the API answers with.
"""


class AnimeTrackError(Exception):
    status_code = 400
    code = 'BAD_REQUEST'
    message = 'Request could not be processed'

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


# validation

class InvalidTarget(AnimeTrackError):
    code = 'INVALID_TARGET'
    message = 'You cannot send a friend request to yourself'


class InvalidStatus(AnimeTrackError):
    status_code = 422
    code = 'INVALID_STATUS'
    message = 'Unknown list status'

    def __init__(self, raw_value):
        super().__init__(f'Unknown list status: {raw_value!r}')
        self.raw_value = raw_value


# relationship state

class AlreadyFriends(AnimeTrackError):
    status_code = 409
    code = 'ALREADY_FRIENDS'
    message = 'Users are already friends'


class AlreadyRequested(AnimeTrackError):
    status_code = 409
    code = 'ALREADY_REQUESTED'
    message = 'Friend request already pending'


class NoSuchRequest(AnimeTrackError):
    status_code = 404
    code = 'NO_SUCH_REQUEST'
    message = 'No pending friend request from this user'


# lookups

class UserNotFound(AnimeTrackError):
    status_code = 404
    code = 'USER_NOT_FOUND'
    message = 'User not found'


class EmailTaken(AnimeTrackError):
    status_code = 409
    code = 'EMAIL_TAKEN'
    message = 'Email is already registered'


class TitleNotFound(AnimeTrackError):
    status_code = 404
    code = 'TITLE_NOT_FOUND'
    message = 'Anime not found'


class CatalogUnavailable(AnimeTrackError):
    status_code = 503
    code = 'CATALOG_UNAVAILABLE'
    message = 'Could not load anime information, please try again later'
