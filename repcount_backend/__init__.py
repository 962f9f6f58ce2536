"""Coaching backend: scores one completed rep and phrases a spoken line.

    uvicorn repcount_backend.main:app --reload
"""
