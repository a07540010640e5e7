from .eligibility import EligibilityView
from .pool import PoolViewSet
from .teams import TeamViewSet
from .invitations import InviteViewSet, JoinRequestViewSet
from .submissions import SubmissionViewSet
