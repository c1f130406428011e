"""
Admin authentication.

There is a single shared admin secret. A correct password sets a flag in the
(signed, cookie-backed) Flask session; admin views are wrapped with
:func:`admin_required`, which sends anyone without the flag back to the login
page.

The secret is either a plain password (``ADMIN_PASS``), compared for exact
equality, or a werkzeug password hash (``ADMIN_PASSWORD_HASH``), which wins
when both are set. Failed attempts are throttled per client address by
:class:`LoginThrottle`.
"""

import hmac
import time
from collections import deque
from functools import wraps
from threading import Lock
from typing import Any, Callable, Deque, Dict, Optional

from flask import Flask, current_app, redirect, session, url_for
from werkzeug.security import check_password_hash

from . import logging

logger = logging.getLogger(__name__)

SESSION_KEY = 'is_admin'


class LoginThrottle:
    """
    Counts failed logins per client within a sliding window.

    Parameters
    ----------
    max_attempts : int
        Failures allowed within the window before the client is locked out.
        ``0`` disables throttling.
    window : float
        Length of the window, in seconds.

    """

    def __init__(self, max_attempts: int = 5, window: float = 300.0,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.max_attempts = max_attempts
        self.window = window
        self._clock = clock
        self._failures: Dict[str, Deque[float]] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        """Number of clients with failures inside the window."""
        with self._lock:
            self._sweep()
            return len(self._failures)

    def _expire(self, key: str) -> Deque[float]:
        failures = self._failures.pop(key, deque())
        cutoff = self._clock() - self.window
        while failures and failures[0] <= cutoff:
            failures.popleft()
        if failures:
            self._failures[key] = failures
        return failures

    def _sweep(self) -> None:
        for key in list(self._failures):
            self._expire(key)

    def is_locked(self, key: str) -> bool:
        """Determine whether ``key`` has used up its attempts."""
        if self.max_attempts <= 0:
            return False
        with self._lock:
            return len(self._expire(key)) >= self.max_attempts

    def failed(self, key: str) -> None:
        """Record a failed attempt for ``key``."""
        with self._lock:
            self._sweep()
            failures = self._failures.setdefault(key, deque())
            failures.append(self._clock())

    def reset(self, key: str) -> None:
        """Forget the failures of ``key``, e.g. after a successful login."""
        with self._lock:
            self._failures.pop(key, None)


def init_app(app: Flask) -> None:
    """Attach a :class:`LoginThrottle` configured from ``app.config``."""
    app.extensions['login_throttle'] = LoginThrottle(
        max_attempts=app.config.get('LOGIN_MAX_ATTEMPTS', 5),
        window=app.config.get('LOGIN_WINDOW_SECONDS', 300)
    )


def get_throttle() -> LoginThrottle:
    """Get the login throttle of the current application."""
    if 'login_throttle' not in current_app.extensions:
        init_app(current_app)
    throttle: LoginThrottle = current_app.extensions['login_throttle']
    return throttle


def check_password(password: str) -> bool:
    """Check ``password`` against the configured admin secret."""
    password_hash = current_app.config.get('ADMIN_PASSWORD_HASH')
    if password_hash:
        return check_password_hash(password_hash, password)
    expected = current_app.config.get('ADMIN_PASS') or ''
    return hmac.compare_digest(password.encode('utf-8'),
                               expected.encode('utf-8'))


def authenticate(password: Optional[str], client: str) -> bool:
    """
    Start an admin session if ``password`` is correct.

    Parameters
    ----------
    password : str
        Password from the login form.
    client : str
        Address of the client, for throttling.

    Returns
    -------
    bool
        Whether the session is now an admin session.

    """
    throttle = get_throttle()
    if throttle.is_locked(client):
        logger.warning('Login refused for %s: too many failed attempts',
                       client)
        return False
    if not check_password(password or ''):
        throttle.failed(client)
        logger.warning('Failed admin login from %s', client)
        return False
    throttle.reset(client)
    session[SESSION_KEY] = True
    logger.info('Admin login from %s', client)
    return True


def end_session() -> None:
    """Forget the admin session."""
    session.clear()


def is_admin() -> bool:
    """Determine whether the current session is an admin session."""
    return bool(session.get(SESSION_KEY))


def admin_required(func: Callable) -> Callable:
    """Decorator that sends non-admin sessions to the login page."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if not is_admin():
            return redirect(url_for('ui.login'))
        return func(*args, **kwargs)
    return wrapper
