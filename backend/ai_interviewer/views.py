import logging

from asgiref.sync import async_to_sync
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .exceptions import InterviewPipelineError, RateLimitError
from .interviewer.config import Analysis, ModelAnswer, Question
from .interviewer.evaluator import AnswerEvaluator
from .interviewer.question_generator import QuestionGenerator
from .interviewer.report import ReportItem, build_report
from .providers import get_llm
from .serializers import AnalyzeRequestSerializer, QuestionRequestSerializer, ReportRequestSerializer

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment before trying again."


def _pipeline_error_response(error: InterviewPipelineError, failure: str) -> Response:
    if isinstance(error, RateLimitError):
        return Response({"error": RATE_LIMIT_MESSAGE}, status=status.HTTP_429_TOO_MANY_REQUESTS)
    return Response(
        {"error": failure, "details": str(error)},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def generate_question_view(request):
    """Generate one interview question for technology/difficulty/type/ordinal."""
    serializer = QuestionRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    generator = QuestionGenerator(get_llm())
    try:
        question = async_to_sync(generator.generate_question)(
            data["technology"], data["difficulty"], data["questionNumber"], data["questionType"]
        )
    except InterviewPipelineError as e:
        logger.error(f"Question generation request failed: {type(e).__name__}: {e}")
        return _pipeline_error_response(e, "Failed to generate question")

    return Response(question.to_dict())


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def analyze_answer_view(request):
    """Score one candidate answer. MCQ is graded locally; other types via the model."""
    serializer = AnalyzeRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    question = Question(
        text=data["question"],
        expected_topics=tuple(data["expectedTopics"]),
        difficulty_tier=data["difficulty"],
        type=data["questionType"],
        model_answer=ModelAnswer(
            correct_option=data.get("correctOption") or None,
            explanation=data.get("explanation", ""),
        ),
    )
    evaluator = AnswerEvaluator(get_llm())
    try:
        analysis = async_to_sync(evaluator.score)(question, data["response"], data["questionType"])
    except InterviewPipelineError as e:
        logger.error(f"Answer analysis request failed: {type(e).__name__}: {e}")
        return _pipeline_error_response(e, "Failed to analyze response")

    return Response(analysis.to_dict())


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def report_view(request):
    """Aggregate answered questions into the results report."""
    serializer = ReportRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    items = []
    for item in serializer.validated_data["items"]:
        analysis = item["analysis"]
        items.append(ReportItem(
            question=item["question"],
            candidate_answer=item["response"],
            analysis=Analysis(
                score=analysis["score"],
                feedback=analysis["feedback"],
                covered_topics=tuple(analysis.get("coveredTopics", [])),
                missing_topics=tuple(analysis.get("missingTopics", [])),
                improvement=analysis.get("improvement") or None,
            ),
        ))
    return Response(build_report(items).to_dict())
