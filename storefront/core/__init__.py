"""
Core building blocks shared by the API: logging, monitoring, database and I/O models.
"""
