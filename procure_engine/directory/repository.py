"""
Vendor & Policy Directory

Configuration records consumed by the pipeline. The core never owns this data;
a directory is injected into the coordinator and read once per stage.

JsonFileDirectory keeps the records in a JSON file so they can be edited
between runs. Future: replace with a real supplier-management or GRC API.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import ConfigurationError
from ..mission.models import Policy, PolicyCategory, Vendor

logger = logging.getLogger(__name__)

Record = Union[Dict[str, Any], BaseModel]


def _validate_records(records: Iterable[Record], model: type, record_type: str) -> List[Any]:
    """
    Turn raw records into validated models.

    Raises:
        ConfigurationError: If any record is missing required fields
    """
    validated = []
    for index, record in enumerate(records):
        if isinstance(record, model):
            validated.append(record)
            continue
        try:
            data = record.model_dump() if isinstance(record, BaseModel) else record
            validated.append(model.model_validate(data))
        except ValidationError as e:
            fields = ", ".join(
                ".".join(str(part) for part in err["loc"]) for err in e.errors()
            )
            raise ConfigurationError(
                f"Malformed {record_type} record at position {index}: invalid or missing {fields}",
                record_type=record_type
            ) from e
    return validated


class BaseDirectory(ABC):
    """
    Provider-agnostic source of vendors and policies.

    Implementations:
    - InMemoryDirectory (records handed in by the caller)
    - JsonFileDirectory (records kept in a JSON file)
    """

    @abstractmethod
    def list_vendors(self) -> List[Vendor]:
        """
        Get every vendor in directory order.

        Raises:
            ConfigurationError: If a vendor record is malformed
        """
        pass

    @abstractmethod
    def list_policies(self) -> List[Policy]:
        """
        Get every policy, active or not.

        Raises:
            ConfigurationError: If a policy record is malformed
        """
        pass

    def active_policies(self) -> List[Policy]:
        """Get the policies currently switched on."""
        return [policy for policy in self.list_policies() if policy.is_active]

    def get_vendor(self, vendor_id: str) -> Optional[Vendor]:
        for vendor in self.list_vendors():
            if vendor.id == vendor_id:
                return vendor
        return None


class InMemoryDirectory(BaseDirectory):
    """
    Directory over records supplied by the caller.

    Raw dictionaries are accepted and validated lazily, so a malformed record
    surfaces as a ConfigurationError in the stage that reads it.
    """

    def __init__(
        self,
        vendors: Optional[Iterable[Record]] = None,
        policies: Optional[Iterable[Record]] = None
    ):
        self._vendors: List[Record] = list(vendors or [])
        self._policies: List[Record] = list(policies or [])

    def list_vendors(self) -> List[Vendor]:
        return _validate_records(self._vendors, Vendor, "vendor")

    def list_policies(self) -> List[Policy]:
        return _validate_records(self._policies, Policy, "policy")


class DirectoryState(BaseModel):
    """On-disk layout of a directory file."""
    last_updated: str = Field(default_factory=lambda: datetime.now().isoformat())
    vendors: List[Dict[str, Any]] = Field(default_factory=list)
    policies: List[Dict[str, Any]] = Field(default_factory=list)


def default_vendors() -> List[Vendor]:
    """Vendors the bundled catalog knows how to quote."""
    return [
        Vendor(id="v-techdirect", name="TechDirect Pro", website="https://techdirect.example.com",
               category="IT Hardware", is_whitelisted=True, rating=4.8,
               contact_email="sales@techdirect.example.com"),
        Vendor(id="v-globalsupply", name="GlobalSupply Co", website="https://globalsupply.example.com",
               category="General", is_whitelisted=True, rating=4.5,
               contact_email="orders@globalsupply.example.com"),
        Vendor(id="v-primeoffice", name="PrimeOffice Solutions", website="https://primeoffice.example.com",
               category="Office Furniture", is_whitelisted=True, rating=4.3,
               contact_email="b2b@primeoffice.example.com"),
        Vendor(id="v-cloudware", name="CloudWare Systems", website="https://cloudware.example.com",
               category="Software", is_whitelisted=False, rating=4.0,
               contact_email="partners@cloudware.example.com"),
        Vendor(id="v-securenet", name="SecureNet Distributors", website="https://securenet.example.com",
               category="Networking", is_whitelisted=True, rating=4.6,
               contact_email="quotes@securenet.example.com"),
        Vendor(id="v-budgettech", name="BudgetTech Outlet", website="https://budgettech.example.com",
               category="IT Hardware", is_whitelisted=False, rating=3.2,
               notes="Discount reseller; limited warranty"),
    ]


def default_policies() -> List[Policy]:
    """Starter policy set mirroring a typical purchasing manual."""
    return [
        Policy(id="p-three-quotes", name="Three-Quote Rule", category=PolicyCategory.SOURCING.value,
               description="Competitive bidding for expensive items",
               rule_text="Items with a unit price over $1,000 require at least 3 competing quotes",
               threshold_amount=1000),
        Policy(id="p-budget-control", name="Budget Control", category=PolicyCategory.BUDGET.value,
               description="Spend ceiling before VP sign-off",
               rule_text="Purchases over $25,000 require VP approval",
               threshold_amount=25000),
        Policy(id="p-approved-vendors", name="Approved Vendor List", category=PolicyCategory.VENDOR.value,
               description="Large purchases go to vetted suppliers",
               rule_text="Purchases over $5,000 must use a whitelisted vendor",
               threshold_amount=5000),
        Policy(id="p-green", name="Green Procurement", category=PolicyCategory.SUSTAINABILITY.value,
               description="Prefer energy-efficient products",
               rule_text="Consider eco-friendly alternatives where available"),
        Policy(id="p-delivery", name="Delivery Window", category=PolicyCategory.LOGISTICS.value,
               description="Keep lead times short",
               rule_text="Orders must ship within 14 days"),
    ]


class JsonFileDirectory(BaseDirectory):
    """
    Directory that reads/writes vendors and policies in a JSON file.

    A missing or empty file is created with the default vendor and policy set.
    """

    def __init__(self, file_path: Union[str, Path]):
        """
        Initialize the file-backed directory.

        Args:
            file_path: Path to the JSON file storing directory state
        """
        self.file_path = Path(file_path)
        logger.info(f"JsonFileDirectory initialized with file: {file_path}")

        if not self.file_path.exists() or self.file_path.stat().st_size == 0:
            self._create_default_directory()

    def _create_default_directory(self) -> None:
        logger.info("Creating default directory file")
        state = DirectoryState(
            vendors=[vendor.model_dump() for vendor in default_vendors()],
            policies=[policy.model_dump() for policy in default_policies()]
        )
        self._save(state)

    def _load(self) -> DirectoryState:
        try:
            with open(self.file_path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in directory file {self.file_path}: {e}")
        try:
            return DirectoryState(**data)
        except (TypeError, ValidationError) as e:
            raise ConfigurationError(f"Unexpected directory file layout in {self.file_path}: {e}")

    def _save(self, state: DirectoryState) -> None:
        state.last_updated = datetime.now().isoformat()
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.file_path, 'w') as f:
            json.dump(state.model_dump(), f, indent=2)
        logger.debug("Directory saved successfully")

    def list_vendors(self) -> List[Vendor]:
        return _validate_records(self._load().vendors, Vendor, "vendor")

    def list_policies(self) -> List[Policy]:
        return _validate_records(self._load().policies, Policy, "policy")

    def add_vendor(self, vendor: Vendor) -> None:
        """Append a vendor, replacing any existing record with the same id."""
        state = self._load()
        state.vendors = [v for v in state.vendors if v.get('id') != vendor.id]
        state.vendors.append(vendor.model_dump())
        self._save(state)
        logger.info(f"Vendor saved: {vendor.name}")

    def remove_vendor(self, vendor_id: str) -> bool:
        """
        Remove a vendor.

        Returns:
            True if a vendor was removed, False if the id was unknown
        """
        state = self._load()
        remaining = [v for v in state.vendors if v.get('id') != vendor_id]
        if len(remaining) == len(state.vendors):
            logger.warning(f"Vendor not found: {vendor_id}")
            return False
        state.vendors = remaining
        self._save(state)
        return True

    def add_policy(self, policy: Policy) -> None:
        """Append a policy, replacing any existing record with the same id."""
        state = self._load()
        state.policies = [p for p in state.policies if p.get('id') != policy.id]
        state.policies.append(policy.model_dump())
        self._save(state)
        logger.info(f"Policy saved: {policy.name}")

    def set_policy_active(self, policy_id: str, active: bool) -> bool:
        """
        Switch a policy on or off.

        Returns:
            True if the policy exists, False otherwise
        """
        state = self._load()
        for record in state.policies:
            if record.get('id') == policy_id:
                record['is_active'] = active
                self._save(state)
                logger.info(f"Policy {policy_id} active={active}")
                return True
        logger.warning(f"Policy not found: {policy_id}")
        return False
