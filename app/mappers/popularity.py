import math

STAR_POINTS = 25
REVIEW_SCORE_POINTS = 30
REVIEW_COUNT_POINTS = 20
REVIEW_COUNT_SATURATION = 1000
VERIFICATION_POINTS = 15
FEATURED_BONUS = 10


def _capped(value: float, ceiling: float) -> float:
    return min(max(value, 0.0), ceiling)


def compute_popularity_score(
    star_rating: float | None,
    review_score: float | None,
    review_count: int | None,
    verification_success_rate: float = 0.0,
    is_featured: bool = False,
) -> int:
    """Popularity in [0, 100].

    25 pts from stars (out of 5), 30 from review score (out of 10), up to 20
    from review volume (saturates at 1000 reviews), 15 from the verification
    success rate and a flat 10 for featured hotels.
    """
    score = 0.0
    if star_rating:
        score += _capped(STAR_POINTS * star_rating / 5, STAR_POINTS)
    if review_score:
        score += _capped(REVIEW_SCORE_POINTS * review_score / 10, REVIEW_SCORE_POINTS)
    if review_count:
        score += _capped(
            REVIEW_COUNT_POINTS * review_count / REVIEW_COUNT_SATURATION,
            REVIEW_COUNT_POINTS,
        )
    score += _capped(VERIFICATION_POINTS * verification_success_rate, VERIFICATION_POINTS)
    if is_featured:
        score += FEATURED_BONUS

    # Half-up rounding, not banker's rounding
    return min(int(math.floor(score + 0.5)), 100)
