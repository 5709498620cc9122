"""Church attendance package.

Organized by feature modules (students, schedules, attendance, ...) with a
thin Flask JSON controller over service/repository layers. The Sunday
aggregation in ``attendance.aggregator`` is pure and has no I/O.
"""
