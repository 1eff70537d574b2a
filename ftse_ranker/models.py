# ftse_ranker/models.py — Constituent records flowing through the pipeline
#
# Every stage returns new records (dataclasses.replace); nothing is mutated in
# place. Unknown price / market cap is always NaN, never None.
from dataclasses import dataclass, field, fields, replace
import numpy as np
from ftse_ranker.utils import is_known


@dataclass(frozen=True)
class RawConstituent:
    name:       str
    ticker:     "str | None" = None
    price:      float = np.nan
    market_cap: float = np.nan
    updated_at: "str | None" = None


@dataclass(frozen=True)
class Company:
    name:         str
    ticker:       str
    price:        float = np.nan
    market_cap:   float = np.nan
    updated_at:   "str | None" = None
    is_candidate: bool = False

    @property
    def has_market_cap(self) -> bool:
        return is_known(self.market_cap)

    def with_quote(self, price, market_cap, updated_at=None) -> "Company":
        return replace(self, price=price, market_cap=market_cap,
                       updated_at=updated_at or self.updated_at)


@dataclass(frozen=True)
class RankedCompany(Company):
    rank: int = 0

    @classmethod
    def from_company(cls, company: Company, rank: int) -> "RankedCompany":
        values = {f.name: getattr(company, f.name) for f in fields(Company)}
        return cls(rank=rank, **values)


@dataclass(frozen=True)
class Snapshot:
    source:     str
    updated_at: str
    companies:  tuple = field(default_factory=tuple)

    def __len__(self):
        return len(self.companies)

    @property
    def candidate(self) -> "RankedCompany | None":
        return next((c for c in self.companies if c.is_candidate), None)

    @property
    def unresolved(self) -> int:
        """Number of constituents without a finite market cap."""
        return sum(1 for c in self.companies if not c.has_market_cap)
