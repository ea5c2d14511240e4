"""
Services package for the TVHeadend Live-TV adapter

This package contains the adapter facade and the request/response translation
layer behind it.
"""
from tvheadend_livetv.services.live_tv_service import LiveTvService, ConfigProvider
from tvheadend_livetv.services.url_builder import AuthMode, build_url

__all__ = [
    'LiveTvService',
    'ConfigProvider',
    'AuthMode',
    'build_url',
]
