from rest_framework import serializers
from django.core.exceptions import ValidationError as DjangoValidationError

from appraisal_app.models import WeightsConfiguration, ConfigurationName
from appraisal_app.utils import LabelChoiceField


class WeightConfigSerializer(serializers.ModelSerializer):
    configuration = LabelChoiceField(choices=ConfigurationName.choices, read_only=True)
    total = serializers.SerializerMethodField()

    class Meta:
        model = WeightsConfiguration
        fields = [
            'configuration',
            'job_knowledge_weight',
            'quality_of_work_weight',
            'adaptability_weight',
            'teamwork_weight',
            'reliability_weight',
            'ethics_weight',
            'customer_service_weight',
            'managerial_skills_weight',
            'total',
        ]
        read_only_fields = ('configuration',)

    def get_total(self, obj):
        return sum(obj.as_weights().values())

    def validate(self, attrs):
        # check the row as it will be saved, partial updates included
        candidate = WeightsConfiguration(configuration=self.instance.configuration)
        for field in self.Meta.fields:
            if field.endswith('_weight'):
                setattr(candidate, field, attrs.get(field, getattr(self.instance, field)))
        try:
            candidate.clean()
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages)
        return attrs
