"""Emergency medical records application.

This package contains the employee record model, the record store and
its projections, and the REST views exposing them to the admin UI and
to anyone scanning an employee's QR code.
"""
