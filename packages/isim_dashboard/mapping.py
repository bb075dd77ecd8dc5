class RecommendationMapper:
    """
    Translates scores and timings into dashboard categories.
    """

    HIGHLY_RECOMMENDED = "Highly Recommended"
    RECOMMENDED = "Recommended"
    CONSIDER = "Consider"
    NOT_RECOMMENDED = "Not Recommended"

    @classmethod
    def get_tier(cls, score: float) -> str:
        if score >= 80: return cls.HIGHLY_RECOMMENDED
        if score >= 65: return cls.RECOMMENDED
        if score >= 50: return cls.CONSIDER
        return cls.NOT_RECOMMENDED

    @classmethod
    def get_efficiency(cls, time_taken: float, time_limit: float) -> int:
        """Faster answers score higher."""
        if time_taken <= time_limit * 0.5: return 100
        if time_taken <= time_limit * 0.75: return 80
        return 60
