# ftse_ranker/ranking.py — Market-cap ranking
import numpy as np
import pandas as pd
from ftse_ranker.models import RankedCompany
from ftse_ranker.utils import _safe


def rank_companies(companies: list) -> tuple:
    """
    Rank by market cap, largest first. Unknown caps go last, and ties
    (including all unknowns) keep their input order. Ranks are 1..N.
    """
    companies = list(companies)
    if not companies:
        return ()
    df = pd.DataFrame({
        "pos":        np.arange(len(companies)),
        "market_cap": [_safe(c.market_cap) for c in companies],
    })
    df["key"] = -df["market_cap"]
    df = df.sort_values("key", kind="mergesort", na_position="last").reset_index(drop=True)
    df["rank"] = df.index + 1
    return tuple(RankedCompany.from_company(companies[int(pos)], int(rank))
                 for pos, rank in zip(df["pos"], df["rank"]))
