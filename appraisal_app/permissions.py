from rest_framework.permissions import BasePermission, SAFE_METHODS


def user_reviews_evaluation(user, evaluation):
    return evaluation.reviewer_id == user.pk


class IsHR(BasePermission):
    def has_permission(self, request, view):
        return request.user.role == "HR"

class IsAdmin(BasePermission):
    def has_permission(self, request, view):
        return request.user.role == "ADMIN"

class IsEvaluator(BasePermission):
    def has_permission(self, request, view):
        return request.user.role == "EVALUATOR"


class IsAdminOrHR(BasePermission):
    """
    Grants permission when the user is ADMIN **or** HR.
    """
    def has_permission(self, request, view):
        return request.user.role in ("ADMIN", "HR")


class CanEditEvaluation(BasePermission):
    '''
    Admin and HR may edit any evaluation.
    Evaluators may edit the evaluations they review.
    Employees only read their own evaluations.
    '''
    def has_permission(self, request, view):
        return request.user and request.user.is_authenticated

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.role in ("ADMIN", "HR"):
            return True
        if request.method in SAFE_METHODS and obj.employee.user_id == user.pk:
            return True
        if user.role == "EVALUATOR":
            return user_reviews_evaluation(user, obj)
        return False
