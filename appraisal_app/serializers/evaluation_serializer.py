from rest_framework import serializers
from django.contrib.auth import get_user_model

from appraisal_app.models import (
    Employee, Evaluation, EvalStatus, EvaluationType, ConfigurationName,
    IndicatorScore, ProbationaryReview, RegularReview,
)
from appraisal_app.utils import LabelChoiceField
from appraisal_app.services.indicators import get_indicator, score_label

User = get_user_model()


class IndicatorScoreSerializer(serializers.ModelSerializer):
    title       = serializers.SerializerMethodField()
    score_label = serializers.SerializerMethodField()

    class Meta:
        model = IndicatorScore
        fields = ["indicator", "category", "title", "score", "score_label", "comment", "updated_at"]
        read_only_fields = fields

    def get_title(self, obj):
        try:
            return get_indicator(obj.indicator).title
        except KeyError:
            return obj.indicator

    def get_score_label(self, obj):
        return score_label(obj.score)


class ScoreEntrySerializer(serializers.Serializer):
    """One `{indicator, score, comment}` entry posted to the scores action (0 = unset)."""
    indicator = serializers.CharField(max_length=40)
    score     = serializers.IntegerField(min_value=0, max_value=5, allow_null=True, required=False)
    comment   = serializers.CharField(allow_blank=True, required=False)


class EvaluationSerializer(serializers.ModelSerializer):

    #--WRITE-ONLY--

    employee_id = serializers.PrimaryKeyRelatedField(
        source="employee",
        queryset=Employee.objects.select_related("branch", "user"),
    )

    reviewer_id = serializers.PrimaryKeyRelatedField(
        source="reviewer",
        queryset=User.objects.all(),
        allow_null=True,
        required=False
    )
    force_job_targets = serializers.BooleanField(required=False, default=False)

    """
    • Scores are read-only here; they are written through the `scores` action.
    • Employee & reviewer use UUIDs but return brief info.
    """
    employee        = serializers.CharField(source="employee.full_name", read_only=True)
    reviewer        = serializers.CharField(source="reviewer.name", read_only=True, default=None)
    evaluation_type = LabelChoiceField(choices=EvaluationType.choices, required=False)
    configuration   = LabelChoiceField(choices=ConfigurationName.choices, read_only=True)
    status          = LabelChoiceField(choices=EvalStatus.choices, read_only=True)

    review_type_probationary = LabelChoiceField(choices=ProbationaryReview.choices, allow_null=True, required=False)
    review_type_regular      = LabelChoiceField(choices=RegularReview.choices, allow_blank=True, required=False)

    indicator_scores = IndicatorScoreSerializer(many=True, read_only=True)
    weights          = serializers.SerializerMethodField()

    class Meta:
        model = Evaluation
        fields = [
            "evaluation_id",
            "employee", "employee_id",
            "reviewer", "reviewer_id",
            "evaluation_type", "configuration", "status", "current_step",
            "show_job_targets", "force_job_targets",
            "review_type_probationary", "review_type_regular",
            "review_type_improvement", "review_type_custom",
            "coverage_from", "coverage_to",
            "priority_area_1", "priority_area_2", "priority_area_3", "remarks",
            "rating", "percentage", "passed",
            "weights",
            "indicator_scores",
            "created_at", "updated_at", "submitted_at",
        ]
        read_only_fields = (
            "evaluation_id", "current_step", "show_job_targets",
            "rating", "percentage", "passed",
            "created_at", "updated_at", "submitted_at",
        )

    # fixed once the evaluation exists
    IMMUTABLE_FIELDS = ("employee", "evaluation_type", "force_job_targets", "reviewer")

    def get_weights(self, obj):
        return {category: weight for category, weight in obj.weight_snapshot().items() if weight}

    def validate(self, attrs):
        if self.instance is not None:
            changed = [
                name for name in self.IMMUTABLE_FIELDS
                if name in attrs and attrs[name] != getattr(self.instance, name)
            ]
            if changed:
                raise serializers.ValidationError(
                    {name: "Cannot be changed after the evaluation has started." for name in changed}
                )
        start, end = attrs.get("coverage_from"), attrs.get("coverage_to")
        if start and end and start >= end:
            raise serializers.ValidationError(
                {"coverage_to": "Performance Coverage 'From' date must be earlier than 'To' date"}
            )
        return attrs

    # ── create / update helpers ──────────────────────────
    def create(self, validated_data):
        from appraisal_app.services.evaluation_start import start_evaluation
        employee = validated_data.pop("employee")
        reviewer = validated_data.pop("reviewer", None)
        evaluation_type = validated_data.pop("evaluation_type", EvaluationType.DEFAULT)
        force = validated_data.pop("force_job_targets", False)
        return start_evaluation(
            employee, reviewer, evaluation_type, force_job_targets=force, **validated_data,
        )

    def update(self, instance, validated_data):
        for name in self.IMMUTABLE_FIELDS:
            validated_data.pop(name, None)
        return super().update(instance, validated_data)


class EvaluationListSerializer(serializers.ModelSerializer):
    employee        = serializers.CharField(source="employee.full_name", read_only=True)
    reviewer        = serializers.CharField(source="reviewer.name", read_only=True, default=None)
    evaluation_type = LabelChoiceField(choices=EvaluationType.choices, read_only=True)
    configuration   = LabelChoiceField(choices=ConfigurationName.choices, read_only=True)
    status          = LabelChoiceField(choices=EvalStatus.choices, read_only=True)

    class Meta:
        model = Evaluation
        fields = [
            "evaluation_id", "employee", "reviewer",
            "evaluation_type", "configuration", "status", "current_step",
            "rating", "percentage", "passed",
            "created_at", "submitted_at",
        ]
        read_only_fields = fields
