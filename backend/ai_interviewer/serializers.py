from rest_framework import serializers

from .interviewer.config import MCQ_LABELS, Difficulty, QuestionType


class QuestionRequestSerializer(serializers.Serializer):
    technology = serializers.CharField(max_length=100, trim_whitespace=True)
    difficulty = serializers.CharField(max_length=20)
    questionNumber = serializers.IntegerField(min_value=1, default=1)
    questionType = serializers.CharField(max_length=20)

    def validate_difficulty(self, value):
        try:
            return Difficulty.parse(value)
        except ValueError as e:
            raise serializers.ValidationError(str(e))

    def validate_questionType(self, value):
        try:
            return QuestionType.parse(value)
        except ValueError as e:
            raise serializers.ValidationError(str(e))


class AnalyzeRequestSerializer(serializers.Serializer):
    question = serializers.CharField()
    response = serializers.CharField(trim_whitespace=False)
    expectedTopics = serializers.ListField(child=serializers.CharField(), allow_empty=True)
    questionType = serializers.CharField(max_length=20)
    difficulty = serializers.IntegerField(min_value=1, max_value=3, default=1)
    correctOption = serializers.CharField(max_length=1, required=False, allow_blank=True)
    explanation = serializers.CharField(required=False, allow_blank=True, default="")
    modelAnswer = serializers.DictField(required=False)

    def validate_questionType(self, value):
        try:
            return QuestionType.parse(value)
        except ValueError as e:
            raise serializers.ValidationError(str(e))

    def validate_correctOption(self, value):
        value = (value or "").strip().upper()
        if value and value not in MCQ_LABELS:
            raise serializers.ValidationError("correctOption must be one of A, B, C, D")
        return value

    def validate(self, attrs):
        # Clients may echo back the generated modelAnswer instead of flattening it
        model_answer = attrs.pop("modelAnswer", None) or {}
        if not attrs.get("correctOption") and model_answer.get("correctOption"):
            try:
                attrs["correctOption"] = self.validate_correctOption(str(model_answer["correctOption"]))
            except serializers.ValidationError as e:
                raise serializers.ValidationError({"correctOption": e.detail})
        if not attrs.get("explanation") and isinstance(model_answer.get("explanation"), str):
            attrs["explanation"] = model_answer["explanation"]

        if attrs["questionType"] is QuestionType.MCQ and not attrs.get("correctOption"):
            raise serializers.ValidationError({"correctOption": "Missing correct option for MCQ"})
        return attrs


class AnalysisSerializer(serializers.Serializer):
    score = serializers.FloatField(min_value=0, max_value=10)
    feedback = serializers.CharField(allow_blank=True)
    coveredTopics = serializers.ListField(child=serializers.CharField(), allow_empty=True, default=list)
    missingTopics = serializers.ListField(child=serializers.CharField(), allow_empty=True, default=list)
    improvement = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReportItemSerializer(serializers.Serializer):
    question = serializers.CharField()
    response = serializers.CharField(allow_blank=True, trim_whitespace=False)
    analysis = AnalysisSerializer()


class ReportRequestSerializer(serializers.Serializer):
    items = ReportItemSerializer(many=True, allow_empty=False)
