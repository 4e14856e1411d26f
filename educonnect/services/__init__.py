"""
服务包初始化文件
"""

from .common_cache import SimpleCache, course_cache
from .recurrence_expander import RecurrenceExpander, parse_schedule, expand_occurrences, resolve_bounds
from .notification_service import NotificationService
from .payment_gateway import PaymentGateway, SimulatedPaymentGateway, StripePaymentGateway, get_payment_gateway
from .course_service import CourseService
from .enrollment_coordinator import EnrollmentCoordinator
from .instructor_service import InstructorService

__all__ = [
    "SimpleCache",
    "course_cache",
    "RecurrenceExpander",
    "parse_schedule",
    "expand_occurrences",
    "resolve_bounds",
    "NotificationService",
    "PaymentGateway",
    "SimulatedPaymentGateway",
    "StripePaymentGateway",
    "get_payment_gateway",
    "CourseService",
    "EnrollmentCoordinator",
    "InstructorService"
]
