"""
Storefront matcher and restrictor.
"""
from .acquisition import HiddenSetProvider
from .config import DEFAULT_CONFIG, RestrictionConfig
from .manager import StorefrontVisibilityManager
from .page import StorefrontPage
from .restrictor import Restrictor
from .scanner import DomScanner, ScanResult
from .scheduler import ScanScheduler
