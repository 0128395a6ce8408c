"""EduLeave package.

School leave-request management organized by feature modules (users,
requests, settings, ...) with a thin Flask controller layer over services
that talk to a remote data gateway.
"""
