"""
In-memory policy catalog.

Stands in for the relational store behind the admin console: reads are open
to everyone, mutations need the admin role. Policies handed out are copies,
so callers can't change catalog state behind its back.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from errors import AdminExists, AdminRequired, PolicyNotFound
from schemas import AdminAccount, AdminIn, Policy, PolicyIn

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
USER_ROLE = "user"

PolicyData = Union[PolicyIn, Mapping[str, Any]]

DEMO_POLICIES: List[Dict[str, Any]] = [
    {
        "name": "Jeevan Anand",
        "minAge": 18,
        "maxAge": 50,
        "description": "Endowment plan with whole-life cover after maturity.",
        "rateTable": {"15": 68.5, "20": 52.4, "25": 44.1},
        "bonus": "Simple reversionary bonus and final additional bonus",
    },
    {
        "name": "Jeevan Labh",
        "minAge": 8,
        "maxAge": 59,
        "description": "Limited premium, non-linked, with-profits endowment plan.",
        "rateTable": {"16": 61.2, "21": 47.8, "25": 41.3},
        "bonus": "Premiums payable for a shorter period than the term",
    },
    {
        "name": "Tech Term",
        "minAge": 18,
        "maxAge": 65,
        "description": "Online pure protection term plan.",
        "rateTable": {"10": 4.2, "20": 5.1, "30": 6.3},
    },
    {
        "name": "Jeevan Tarun",
        "minAge": 0,
        "maxAge": 12,
        "description": "Children's plan with survival benefits from age 20 to 24. Contact an agent for a quote.",
    },
]


def require_admin(role: Optional[str]) -> None:
    if role != ADMIN_ROLE:
        raise AdminRequired()


class PolicyCatalog:
    """Catalog of policies keyed by sequential integer id."""

    def __init__(self, policies: Optional[Iterable[PolicyData]] = None):
        self._policies: Dict[int, Policy] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        if policies:
            self.seed(policies)

    @staticmethod
    def _validate(data: PolicyData) -> PolicyIn:
        if isinstance(data, PolicyIn):
            return PolicyIn.model_validate(data.model_dump())
        return PolicyIn.model_validate(dict(data))

    def _insert(self, data: PolicyIn) -> Policy:
        policy = Policy(id=self._next_id, **data.model_dump())
        self._policies[policy.id] = policy
        self._next_id += 1
        return policy

    def seed(self, policies: Iterable[PolicyData]) -> int:
        """Insert policies without a role check; returns how many were added."""
        validated = [self._validate(p) for p in policies]
        with self._lock:
            for data in validated:
                self._insert(data)
        logger.info("Seeded %d policies", len(validated))
        return len(validated)

    def count(self) -> int:
        with self._lock:
            return len(self._policies)

    def list_policies(self) -> List[Policy]:
        with self._lock:
            return [p.model_copy(deep=True) for p in self._policies.values()]

    def get(self, policy_id: int) -> Policy:
        with self._lock:
            policy = self._policies.get(policy_id)
            if policy is None:
                raise PolicyNotFound(policy_id)
            return policy.model_copy(deep=True)

    def create(self, data: PolicyData, role: Optional[str] = None) -> Policy:
        require_admin(role)
        validated = self._validate(data)
        with self._lock:
            policy = self._insert(validated)
        logger.info("Created policy %s (%s)", policy.id, policy.name, extra={"policy_id": policy.id})
        return policy.model_copy(deep=True)

    def update(self, policy_id: int, data: PolicyData, role: Optional[str] = None) -> Policy:
        """Replace every field of an existing policy; the id is kept."""
        require_admin(role)
        validated = self._validate(data)
        with self._lock:
            if policy_id not in self._policies:
                raise PolicyNotFound(policy_id)
            policy = Policy(id=policy_id, **validated.model_dump())
            self._policies[policy_id] = policy
        logger.info("Updated policy %s", policy_id, extra={"policy_id": policy_id})
        return policy.model_copy(deep=True)

    def delete(self, policy_id: int, role: Optional[str] = None) -> None:
        require_admin(role)
        with self._lock:
            if self._policies.pop(policy_id, None) is None:
                raise PolicyNotFound(policy_id)
        logger.info("Deleted policy %s", policy_id, extra={"policy_id": policy_id})


class AdminRegistry:
    """Admin accounts known to the console.

    Only the directory record is kept here; passwords and tokens belong to the
    identity service. Usernames and emails are unique, compared case-insensitively.
    """

    def __init__(self):
        self._admins: Dict[int, AdminAccount] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def list_admins(self, role: Optional[str] = None) -> List[AdminAccount]:
        require_admin(role)
        with self._lock:
            return [a.model_copy() for a in self._admins.values()]

    def create(self, data: Union[AdminIn, Mapping[str, Any]], role: Optional[str] = None) -> AdminAccount:
        require_admin(role)
        if isinstance(data, AdminIn):
            data = data.model_dump()
        validated = AdminIn.model_validate(dict(data))
        with self._lock:
            for admin in self._admins.values():
                if (admin.username.lower() == validated.username.lower()
                        or admin.email.lower() == validated.email.lower()):
                    raise AdminExists()
            admin = AdminAccount(
                id=self._next_id,
                created_at=datetime.now(timezone.utc),
                **validated.model_dump(),
            )
            self._admins[admin.id] = admin
            self._next_id += 1
        logger.info("Registered admin %s", admin.username)
        return admin.model_copy()
