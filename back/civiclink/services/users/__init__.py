# Local application imports
from civiclink.services.users.civic_score_services import build_leaderboard, civic_score, compute_user_stats

__all__ = ["build_leaderboard", "civic_score", "compute_user_stats"]
