"""CSRF protection for forms

Synchronizer-token guard: every session gets one random token, and POST, PUT
and DELETE requests must send it back in the form body under ``token_key``.

    guard = CsrfGuard()

    def create_app():
        app = Flask(__name__)
        guard.init_app(app)
        guard.add_excluded_routes(['hooks.incoming'])
        return app
"""
import hmac
import logging
import secrets
from functools import wraps

from flask import Response, abort, g, request, session
from flask.sessions import NullSession
from werkzeug.routing import BuildError

from config import GuardConfig
from errors import ConfigurationError, InvalidArgumentError, SessionRequiredError

log = logging.getLogger(__name__)

CHECKED_METHODS = frozenset(('POST', 'PUT', 'DELETE'))
INVALID_TOKEN_MESSAGE = 'Invalid or missing CSRF token.'


def url_map_resolver(app):
    """Return a resolver that turns an endpoint name into a path on ``app``."""
    def resolve(endpoint):
        # request.path is relative to the application root, so build against '/'
        adapter = app.url_map.bind('localhost', script_name='/')
        try:
            return adapter.build(endpoint)
        except BuildError as e:
            raise ConfigurationError('Cannot resolve route %r to a path' % (endpoint,)) from e
    return resolve


class CsrfGuard:
    def __init__(self, token_key='csrf_token', app=None, resolver=None,
                 check_without_exclusions=False, rotate_on_success=False,
                 token_bytes=32, config=None):
        if config is None:
            config = GuardConfig(
                token_key=token_key,
                check_without_exclusions=check_without_exclusions,
                rotate_on_success=rotate_on_success,
                token_bytes=token_bytes,
            )
        self.config = config
        self.excluded_paths = []
        self._resolve = resolver

        if app is not None:
            self.init_app(app)

    @property
    def token_key(self):
        return self.config.token_key

    def init_app(self, app):
        """Install the guard as a before-request hook on ``app``."""
        if self._resolve is None:
            self._resolve = url_map_resolver(app)
        app.extensions['csrf_guard'] = self

        app.before_request(self.check)

        @app.context_processor
        def inject_view_data():
            return dict(g.get('view_data', {}))

        log.debug('CSRF guard installed on %s with token key %r', app.name, self.token_key)

    def add_excluded_routes(self, routes):
        """Exempt one route reference or a list of them from validation.

        References are resolved to paths immediately, so the routes must
        already be registered.
        """
        if isinstance(routes, str):
            if not routes:
                raise InvalidArgumentError('add_excluded_routes expects a non-empty route reference')
            routes = [routes]
        elif isinstance(routes, (list, tuple)):
            if not routes or not all(isinstance(r, str) and r for r in routes):
                raise InvalidArgumentError(
                    'add_excluded_routes expects a list of strings, or a string'
                )
        else:
            raise InvalidArgumentError('add_excluded_routes expects a list of strings, or a string')

        if self._resolve is None:
            raise ConfigurationError('No router bound; call init_app() or pass resolver=')

        paths = [self._resolve(r) for r in routes]
        self.excluded_paths.extend(paths)
        log.info('CSRF validation disabled for %s', ', '.join(paths))

    def generate_token(self):
        return secrets.token_hex(self.config.token_bytes)

    def should_check(self, method, path):
        if self.excluded_paths:
            check_path = path not in self.excluded_paths
        else:
            check_path = self.config.check_without_exclusions
        return check_path and method in CHECKED_METHODS

    def intercept(self, request, session, abort, render_context):
        """Validate one request against ``session``.

        ``abort(status, body)`` must not return. ``render_context(mapping)``
        merges the published key and token into the view data. Returns the
        token that was published.
        """
        if session is None:
            raise SessionRequiredError()

        key = self.token_key
        if key not in session:
            session.setdefault(key, self.generate_token())
            log.debug('Issued new CSRF token')
        token = session[key]

        if self.should_check(request.method, request.path):
            user_token = request.form.get(key)
            if not user_token or not hmac.compare_digest(
                    str(user_token).encode('utf-8'), str(token).encode('utf-8')):
                log.warning('Rejected %s %s: invalid or missing CSRF token',
                            request.method, request.path)
                abort(400, INVALID_TOKEN_MESSAGE)
                return None
            if self.config.rotate_on_success:
                token = self.generate_token()
                session[key] = token

        render_context({'csrf_key': key, 'csrf_token': token})
        return token

    def check(self):
        """Run :meth:`intercept` against the current Flask request."""
        if g.get('csrf_checked'):
            return
        self.intercept(request, _active_session(), _abort_plain, _merge_view_data)
        g.csrf_checked = True

    def protect(self, view):
        """Decorator: validate the current request before calling ``view``."""
        @wraps(view)
        def decorated_function(*args, **kwargs):
            self.check()
            return view(*args, **kwargs)
        return decorated_function

    def current_token(self):
        """Return the session's token, issuing one if needed."""
        sess = _active_session()
        if sess is None:
            raise SessionRequiredError()
        if self.token_key not in sess:
            sess.setdefault(self.token_key, self.generate_token())
        return sess[self.token_key]


def _active_session():
    current = session._get_current_object()
    if isinstance(current, NullSession):
        return None
    return current


def _abort_plain(status, body):
    abort(Response(body, status=status, mimetype='text/plain'))


def _merge_view_data(mapping):
    g.setdefault('view_data', {}).update(mapping)
