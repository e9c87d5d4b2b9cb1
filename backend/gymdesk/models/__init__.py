# Every model is imported here for Alembic autogenerate
from gymdesk.models.tenant import Tenant
from gymdesk.models.branch import Branch, UserBranch
from gymdesk.models.user import User
from gymdesk.models.membership_plan import MembershipPlan
from gymdesk.models.customer_subscription import CustomerSubscription
from gymdesk.models.member_audit_log import MemberAuditLog
from gymdesk.models.terminal import Terminal
from gymdesk.models.card import InventoryCard, Card, PendingMemberAssignment
from gymdesk.models.access_event import AccessEvent
from gymdesk.models.email_log import EmailLog
from gymdesk.models.system_setting import SystemSetting

__all__ = [
    "Tenant",
    "Branch",
    "UserBranch",
    "User",
    "MembershipPlan",
    "CustomerSubscription",
    "MemberAuditLog",
    "Terminal",
    "InventoryCard",
    "Card",
    "PendingMemberAssignment",
    "AccessEvent",
    "EmailLog",
    "SystemSetting",
]
