from hr_portal.core.config import settings
from hr_portal.providers.object_storage import ObjectStorageClient
from hr_portal.providers.stream_chat import StreamChatClient
from hr_portal.repositories.data_store import DataStore
from hr_portal.repositories.seed import seed_demo_data
from hr_portal.services.analytics_service import AnalyticsService, EventLogger
from hr_portal.services.auth_service import AuthService
from hr_portal.services.chat_service import ChatService
from hr_portal.services.department_service import DepartmentService
from hr_portal.services.document_service import DocumentService
from hr_portal.services.employee_service import EmployeeService
from hr_portal.services.expense_service import ExpenseService
from hr_portal.services.leave_balance_service import LeaveBalanceLedger
from hr_portal.services.leave_service import LeaveService
from hr_portal.services.notification_service import NotificationService
from hr_portal.services.role_service import RoleService
from hr_portal.services.succession_service import SuccessionService


store = DataStore()
event_logger = EventLogger()

if settings.seed_demo_data:
    seed_demo_data(store)

notification_service = NotificationService(store=store)
analytics_service = AnalyticsService(store=store, event_logger=event_logger)
auth_service = AuthService(store=store, event_logger=event_logger)
role_service = RoleService(
    store=store,
    event_logger=event_logger,
    notification_service=notification_service,
)
employee_service = EmployeeService(store=store, event_logger=event_logger, role_service=role_service)
department_service = DepartmentService(store=store, event_logger=event_logger)
succession_service = SuccessionService(
    store=store,
    event_logger=event_logger,
    employee_service=employee_service,
    department_service=department_service,
    role_service=role_service,
    notification_service=notification_service,
)
leave_ledger = LeaveBalanceLedger(store=store)
leave_service = LeaveService(
    store=store,
    event_logger=event_logger,
    employee_service=employee_service,
    ledger=leave_ledger,
    notification_service=notification_service,
)
expense_service = ExpenseService(
    store=store,
    event_logger=event_logger,
    employee_service=employee_service,
    notification_service=notification_service,
)
chat_service = ChatService(
    client=StreamChatClient(
        api_key=settings.stream_api_key,
        api_secret=settings.stream_api_secret,
        base_url=settings.stream_base_url,
    ),
    event_logger=event_logger,
)
document_service = DocumentService(
    storage=ObjectStorageClient(
        base_url=settings.storage_url,
        service_key=settings.storage_service_key,
        bucket=settings.storage_bucket,
    ),
    employee_service=employee_service,
    event_logger=event_logger,
)
