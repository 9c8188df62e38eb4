from .conversation import ConversationState, to_model_role
from .error_handling import (ConfigurationError, InputValidationError, ModelInvocationError, ResponseParseError,
                             ReviewerError)
from .language_tutor import DebateReply, DebateSession, LanguageTutor
from .models import AnalysisResult, ChecklistItem, ChecklistResult, ConversationTurn, SintaLevel, Speaker
from .report import ReportGenerator
from .sinta_service import ReviewerSession, SintaReviewer
from .utils.config import Config, GenerationProfile, load_config, setup_logging
from .utils.text_generation import GeminiClient, InlineAttachment

__version__ = "0.1.0"
