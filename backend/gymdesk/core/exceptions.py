"""Domain errors raised by the service layer"""


class GymDeskError(Exception):
    """Base class for domain errors"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(GymDeskError):
    status_code = 404


class Conflict(GymDeskError):
    status_code = 409


class MemberNotFound(NotFound):
    def __init__(self, member_id: int):
        super().__init__(f"Member {member_id} not found")
        self.member_id = member_id


class PlanNotFound(NotFound):
    def __init__(self, plan_id: int):
        super().__init__(f"Membership plan {plan_id} not found or inactive")


class SubscriptionNotFound(NotFound):
    pass


class InvalidMemberTransition(GymDeskError):
    """Requested member action is not allowed from the current state"""


class DuplicateRenewal(Conflict):
    pass


class DuplicateMember(Conflict):
    pass


class TerminalAuthError(GymDeskError):
    status_code = 401


class CardAssignmentError(Conflict):
    pass
