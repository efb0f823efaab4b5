"""Services package"""
from intentbot.services.knowledge_service import knowledge_service
from intentbot.services.intent_detector import intent_detector
from intentbot.services.intent_router import intent_router
from intentbot.services.ai_service import ai_service
from intentbot.services.response_generator import response_generator
from intentbot.services.message_processor import message_processor
