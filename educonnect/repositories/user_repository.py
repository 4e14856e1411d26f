"""
用户、学习进度与通知数据库操作层
"""

from educonnect.models.user import UserAccount
from educonnect.models.progress import CourseProgress
from educonnect.models.notification import Notification
from educonnect.models.database.user_db import UserDB, CourseProgressDB, NotificationDB
from educonnect.repositories.base_repository import DocumentRepository


class UserRepository(DocumentRepository[UserAccount]):

    db_model = UserDB
    model = UserAccount
    id_field = "user_id"


class CourseProgressRepository(DocumentRepository[CourseProgress]):

    db_model = CourseProgressDB
    model = CourseProgress
    id_field = "progress_id"


class NotificationRepository(DocumentRepository[Notification]):

    db_model = NotificationDB
    model = Notification
    id_field = "notification_id"
