"""Event kind numbers and their classification."""

from __future__ import annotations

from enum import IntEnum


class Kind(IntEnum):
    """Known event kinds."""

    PROFILE_METADATA = 0
    TEXT_NOTE = 1
    RECOMMEND_SERVER = 2
    FOLLOW_LIST = 3
    ENCRYPTED_DIRECT_MESSAGE = 4
    DELETION = 5
    REPOST = 6
    REACTION = 7
    BADGE_AWARD = 8
    SIMPLE_GROUP_CHAT_MESSAGE = 9
    SIMPLE_GROUP_THREADED_REPLY = 10
    SIMPLE_GROUP_THREAD = 11
    SIMPLE_GROUP_REPLY = 12
    SEAL = 13
    DIRECT_MESSAGE = 14
    GENERIC_REPOST = 16
    REACTION_TO_WEBSITE = 17
    CHANNEL_CREATION = 40
    CHANNEL_METADATA = 41
    CHANNEL_MESSAGE = 42
    CHANNEL_HIDE_MESSAGE = 43
    CHANNEL_MUTE_USER = 44
    CHESS = 64
    MERGE_REQUESTS = 818
    BID = 1021
    BID_CONFIRMATION = 1022
    OPEN_TIMESTAMPS = 1040
    GIFT_WRAP = 1059
    FILE_METADATA = 1063
    LIVE_CHAT_MESSAGE = 1311
    PATCH = 1617
    ISSUE = 1621
    REPLY = 1622
    STATUS_OPEN = 1630
    STATUS_APPLIED = 1631
    STATUS_CLOSED = 1632
    STATUS_DRAFT = 1633
    PROBLEM_TRACKER = 1971
    REPORTING = 1984
    LABEL = 1985
    RELAY_REVIEWS = 1986
    AI_EMBEDDINGS = 1987
    TORRENT = 2003
    TORRENT_COMMENT = 2004
    COINJOIN_POOL = 2022
    COMMUNITY_POST_APPROVAL = 4550
    JOB_FEEDBACK = 7000
    SIMPLE_GROUP_ADD_USER = 9000
    SIMPLE_GROUP_REMOVE_USER = 9001
    SIMPLE_GROUP_EDIT_METADATA = 9002
    SIMPLE_GROUP_ADD_PERMISSION = 9003
    SIMPLE_GROUP_REMOVE_PERMISSION = 9004
    SIMPLE_GROUP_DELETE_EVENT = 9005
    SIMPLE_GROUP_EDIT_GROUP_STATUS = 9006
    SIMPLE_GROUP_CREATE_GROUP = 9007
    SIMPLE_GROUP_DELETE_GROUP = 9008
    SIMPLE_GROUP_JOIN_REQUEST = 9021
    SIMPLE_GROUP_LEAVE_REQUEST = 9022
    ZAP_GOAL = 9041
    TIDAL_LOGIN = 9467
    ZAP_REQUEST = 9734
    ZAP = 9735
    HIGHLIGHTS = 9802
    MUTE_LIST = 10000
    PIN_LIST = 10001
    RELAY_LIST_METADATA = 10002
    BOOKMARK_LIST = 10003
    COMMUNITY_LIST = 10004
    PUBLIC_CHAT_LIST = 10005
    BLOCKED_RELAY_LIST = 10006
    SEARCH_RELAY_LIST = 10007
    SIMPLE_GROUP_LIST = 10009
    INTEREST_LIST = 10015
    EMOJI_LIST = 10030
    DM_RELAY_LIST = 10050
    USER_SERVER_LIST = 10063
    FILE_STORAGE_SERVER_LIST = 10096
    GOOD_WIKI_AUTHOR_LIST = 10101
    GOOD_WIKI_RELAY_LIST = 10102
    NWC_WALLET_INFO = 13194
    LIGHTNING_PUB_RPC = 21000
    CLIENT_AUTHENTICATION = 22242
    NWC_WALLET_REQUEST = 23194
    NWC_WALLET_RESPONSE = 23195
    NOSTR_CONNECT = 24133
    BLOBS = 24242
    HTTP_AUTH = 27235
    CATEGORIZED_PEOPLE_LIST = 30000
    CATEGORIZED_BOOKMARKS_LIST = 30001
    RELAY_SETS = 30002
    BOOKMARK_SETS = 30003
    CURATED_SETS = 30004
    CURATED_VIDEO_SETS = 30005
    MUTE_SETS = 30007
    PROFILE_BADGES = 30008
    BADGE_DEFINITION = 30009
    INTEREST_SETS = 30015
    STALL_DEFINITION = 30017
    PRODUCT_DEFINITION = 30018
    MARKETPLACE_UI = 30019
    PRODUCT_SOLD_AS_AUCTION = 30020
    ARTICLE = 30023
    DRAFT_ARTICLE = 30024
    EMOJI_SETS = 30030
    MODULAR_ARTICLE_HEADER = 30040
    MODULAR_ARTICLE_CONTENT = 30041
    RELEASE_ARTIFACT_SETS = 30063
    APPLICATION_SPECIFIC_DATA = 30078
    LIVE_EVENT = 30311
    USER_STATUSES = 30315
    CLASSIFIED_LISTING = 30402
    DRAFT_CLASSIFIED_LISTING = 30403
    REPOSITORY_ANNOUNCEMENT = 30617
    REPOSITORY_STATE = 30618
    SIMPLE_GROUP_METADATA = 39000
    WIKI_ARTICLE = 30818
    REDIRECTS = 30819
    FEED = 31890
    DATE_CALENDAR_EVENT = 31922
    TIME_CALENDAR_EVENT = 31923
    CALENDAR = 31924
    CALENDAR_EVENT_RSVP = 31925
    HANDLER_RECOMMENDATION = 31989
    HANDLER_INFORMATION = 31990
    VIDEO_EVENT = 34235
    SHORT_VIDEO_EVENT = 34236
    VIDEO_VIEW_EVENT = 34237
    COMMUNITY_DEFINITION = 34550
    SIMPLE_GROUP_ADMINS = 39001
    SIMPLE_GROUP_MEMBERS = 39002


def is_regular(kind: int) -> bool:
    """Regular events are stored and never replaced."""
    return kind < 1000 and kind not in (0, 3)


def is_replaceable(kind: int) -> bool:
    """Only the latest event of a replaceable kind per author is kept."""
    return kind in (0, 3) or 10000 <= kind < 20000


def is_ephemeral(kind: int) -> bool:
    """Ephemeral events are not expected to be stored."""
    return 20000 <= kind < 30000


def is_addressable(kind: int) -> bool:
    """Addressable events are replaced per author, kind and ``d`` tag."""
    return 30000 <= kind < 40000