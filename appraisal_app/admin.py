from django.contrib import admin
from .import models as m
from .services.evaluation_math import recompute


# ───────────────────────────────
#  Branch
# ───────────────────────────────
@admin.register(m.Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "location", "created_at")
    search_fields = ("name", "code", "location")


# ───────────────────────────────
#  Employee
# ───────────────────────────────
@admin.register(m.Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("user", "position", "get_branch_name", "status", "hire_date")
    list_filter  = ("status", "branch")
    search_fields = ("user__name", "user__email", "position")
    autocomplete_fields = ["user", "branch"]

    @admin.display(description="Branch")
    def get_branch_name(self, obj):
        return obj.branch.name if obj.branch else "-"


# ───────────────────────────────
#  WeightsConfiguration
# ───────────────────────────────
@admin.register(m.WeightsConfiguration)
class WeightConfigAdmin(admin.ModelAdmin):
    list_display = ("configuration", "job_knowledge_weight", "quality_of_work_weight",
                    "adaptability_weight", "teamwork_weight", "reliability_weight",
                    "ethics_weight", "customer_service_weight", "managerial_skills_weight")
    list_editable = ("job_knowledge_weight", "quality_of_work_weight",
                     "adaptability_weight", "teamwork_weight", "reliability_weight",
                     "ethics_weight", "customer_service_weight", "managerial_skills_weight")


# ───────────────────────────────
#  Evaluation
# ───────────────────────────────
class IndicatorScoreInline(admin.TabularInline):
    model = m.IndicatorScore
    extra = 0
    fields = ("category", "indicator", "score", "comment")
    readonly_fields = ("category", "indicator")


@admin.register(m.Evaluation)
class EvaluationAdmin(admin.ModelAdmin):
    list_display = ("employee", "configuration", "status", "rating", "percentage", "passed", "reviewer", "created_at")
    list_filter  = ("configuration", "evaluation_type", "status", "passed")
    search_fields = ("employee__user__name", "reviewer__name")
    autocomplete_fields = ["employee", "reviewer"]
    readonly_fields = ("configuration", "rating", "percentage", "passed", "submitted_at")
    inlines = [IndicatorScoreInline]
    actions = ["recompute_results"]

    @admin.action(description="Recompute rating / percentage from scores")
    def recompute_results(self, request, queryset):
        for evaluation in queryset:
            recompute(evaluation)
        self.message_user(request, f"Recomputed {queryset.count()} evaluations.")


@admin.register(m.SubmissionRecord)
class SubmissionRecordAdmin(admin.ModelAdmin):
    list_display = ("evaluation", "route", "created_at")
    list_filter = ("route",)
    readonly_fields = ("evaluation", "route", "payload", "created_at")
