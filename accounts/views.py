# accounts/views.py
from __future__ import annotations

from django.views.decorators.http import require_GET

from core.api import api_view, json_success

from .decorators import api_login_required
from .models import Profile


@require_GET
@api_login_required
@api_view
def me(request):
    user = request.user
    profile, _ = Profile.objects.get_or_create(user=user)
    return json_success(
        {
            "id": user.pk,
            "username": user.username,
            "email": user.email,
            "store_name": profile.public_store_name,
            "roles": profile.roles(),
        }
    )
