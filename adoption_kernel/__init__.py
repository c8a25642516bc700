"""
Adoption Kernel

Tracks adoptable animals from intake to adoption with:
- Atomic adoption finalization (pet + application + adoption record)
- Custodian-ownership authorization
- Append-only adoption records
- Typed, categorised errors returned as tagged results
"""

__version__ = "0.1.0"
