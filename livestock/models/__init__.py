from livestock.models.user_model import AppRole, User, Profile, UserRole, EmergencyContact
from livestock.models.animal_model import (
    Species, Gender, HealthStatus, Animal, HealthRecord, Vaccination, BreedingRecord
)
from livestock.models.feeding_model import FeedingSchedule, FeedingLog, FeedInventory
from livestock.models.marketplace_model import (
    ListingStatus, EnquiryStatus, MarketplaceListing, MarketplaceEnquiry, MarketplaceReview
)
from livestock.models.helpdesk_model import (
    TicketStatus, TicketPriority, HelpdeskTicket, HelpdeskResponse, HelpdeskSlaConfig
)
from livestock.models.chat_model import Conversation, ConversationParticipant, Message, AiChatMessage
from livestock.models.content_model import (
    ContentCategory, ContentType, PriorityLevel, GovernmentScheme, CmsContent,
    SubscriptionPlan, UserSubscription, Notification
)
from livestock.models.activity_model import UserActivityLog

__all__ = [
    'AppRole', 'User', 'Profile', 'UserRole', 'EmergencyContact',
    'Species', 'Gender', 'HealthStatus', 'Animal', 'HealthRecord', 'Vaccination', 'BreedingRecord',
    'FeedingSchedule', 'FeedingLog', 'FeedInventory',
    'ListingStatus', 'EnquiryStatus', 'MarketplaceListing', 'MarketplaceEnquiry', 'MarketplaceReview',
    'TicketStatus', 'TicketPriority', 'HelpdeskTicket', 'HelpdeskResponse', 'HelpdeskSlaConfig',
    'Conversation', 'ConversationParticipant', 'Message', 'AiChatMessage',
    'ContentCategory', 'ContentType', 'PriorityLevel', 'GovernmentScheme', 'CmsContent',
    'SubscriptionPlan', 'UserSubscription', 'Notification',
    'UserActivityLog',
]
