"""
Request controllers.

Controllers take request data and return a ``(body, status, headers)``
tuple; they raise :mod:`werkzeug.exceptions` for error responses.
"""
