"""API views for reviews."""

from __future__ import annotations

from rest_framework import mixins, permissions, viewsets  # type: ignore

from .models import Review
from .serializers import ReviewSerializer


class ReviewViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Public list of reviews; authenticated users create them.

    ``?subject=``, ``?reviewer=`` and ``?listing=`` filter the list. With
    ``subject`` the response also carries the subject's average rating.
    """

    queryset = Review.objects.select_related('reviewer', 'subject', 'listing')
    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        params = self.request.query_params
        for param in ('subject', 'reviewer', 'listing'):
            value = params.get(param)
            if value and value.isdigit():
                qs = qs.filter(**{f'{param}_id': int(value)})
        return qs

    def list(self, request, *args, **kwargs):  # type: ignore
        response = super().list(request, *args, **kwargs)
        subject = request.query_params.get('subject')
        if subject and subject.isdigit():
            summary = Review.objects.filter(subject_id=int(subject)).rating_summary()
            if isinstance(response.data, dict):
                response.data.update(summary)
            else:
                response.data = {'results': response.data, **summary}
        return response

    def perform_create(self, serializer):  # type: ignore
        serializer.save(reviewer=self.request.user)
