"""
Dashboard alerts for every template

Enabled in settings.TEMPLATES['OPTIONS']['context_processors'] as
'salon.core.context_processors.dashboard_alerts'.
"""
from salon.analytics.reports import dashboard_alerts as build_dashboard_alerts


def dashboard_alerts(request):
    """Alert list and counts for the notification bell, authenticated users only"""
    if not request.user.is_authenticated:
        return {'dashboard_alerts': [], 'dashboard_alerts_count': 0}

    data = build_dashboard_alerts()
    return {
        'dashboard_alerts': data['alerts'],
        'dashboard_alerts_count': len(data['alerts']),
    }
