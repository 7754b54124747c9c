"""sitepay package.

Attendance ledger and payment request workflow for project owners,
organized by feature modules (attendance, payments, statistics, ...) with a
thin Flask controller layer over service/repository layers.
"""
