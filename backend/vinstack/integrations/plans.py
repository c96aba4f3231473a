"""Read-only pricing plans."""
from vinstack.models.user import SubscriptionTier

PLANS: tuple[dict, ...] = (
    {
        "plan_id": SubscriptionTier.free.value,
        "name": "Free",
        "price": 0.0,
        "interval": "month",
        "max_snippets": 10,
        "max_collaborators": 0,
        "features": [
            "10 public snippets",
            "Basic syntax highlighting",
            "Community support",
            "Export to GitHub Gist",
        ],
    },
    {
        "plan_id": SubscriptionTier.pro.value,
        "name": "Pro",
        "price": 9.99,
        "interval": "month",
        "max_snippets": 500,
        "max_collaborators": 5,
        "stripe_price_id": "price_pro_monthly",
        "is_popular": True,
        "features": [
            "500 private snippets",
            "Real-time collaboration",
            "Advanced search & filters",
            "Version history",
            "Priority support",
            "Custom themes",
            "API access",
        ],
    },
    {
        "plan_id": SubscriptionTier.team.value,
        "name": "Team",
        "price": 29.99,
        "interval": "month",
        "max_snippets": -1,
        "max_collaborators": -1,
        "stripe_price_id": "price_team_monthly",
        "features": [
            "Unlimited snippets",
            "Unlimited collaborators",
            "Team management",
            "Advanced analytics",
            "SSO integration",
            "Custom branding",
            "Dedicated support",
            "Audit logs",
        ],
    },
)


def plan_for_price(price_id: str):
    return next((p for p in PLANS if p.get("stripe_price_id") == price_id), None)
