"""
API Routes package
"""
from . import users, lessons, assignments, submissions, progress, messages, achievements

__all__ = ['users', 'lessons', 'assignments', 'submissions', 'progress', 'messages', 'achievements']
