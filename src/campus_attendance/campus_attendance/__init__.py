"""Campus Attendance package.

Organized by feature modules (identities, users, attendance, leaves) with a
thin Flask controller layer over service/repository layers.
"""
