"""
EduConnect 课程报名后端
"""

__version__ = "1.0.0"
