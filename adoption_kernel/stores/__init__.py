"""Entity stores: point reads, listings and conditional writes (flush only)."""

from adoption_kernel.stores.adoption_store import AdoptionInfo, AdoptionStore
from adoption_kernel.stores.application_store import ApplicationInfo, ApplicationStore
from adoption_kernel.stores.custodian_store import CustodianInfo, CustodianStore
from adoption_kernel.stores.pet_store import PetInfo, PetStore
from adoption_kernel.stores.user_store import UserInfo, UserStore

__all__ = [
    "AdoptionInfo",
    "AdoptionStore",
    "ApplicationInfo",
    "ApplicationStore",
    "CustodianInfo",
    "CustodianStore",
    "PetInfo",
    "PetStore",
    "UserInfo",
    "UserStore",
]
