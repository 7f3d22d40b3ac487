"""
Inventory providers that supply assets to the evaluator
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Set

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import ScanConfig
from .engine import AssetError
from .exceptions import InvalidAssetError, InventoryError
from .framework import Asset, AssetType

logger = logging.getLogger(__name__)


def _error_code(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get('Error', {}).get('Code', '')
    return ''


class InventoryProvider(ABC):
    """Source of cloud asset records"""

    @abstractmethod
    def fetch_assets(self) -> List[Asset]:
        """Return the current inventory as unevaluated assets"""
        pass


class MockInventoryProvider(InventoryProvider):
    """Static inventory standing in for a cloud asset API"""

    def fetch_assets(self) -> List[Asset]:
        return [
            Asset(
                id="gcp-001",
                type=AssetType.STORAGE_BUCKET,
                name="mercad-prod-user-photos",
                is_public=True,
                tags=frozenset({"production", "user_data"}),
            ),
            Asset(
                id="gcp-002",
                type=AssetType.VM_INSTANCE,
                name="mercad-dev-worker-01",
                is_public=False,
                tags=frozenset({"development", "no_pii"}),
            ),
            Asset(
                id="gcp-003",
                type=AssetType.STORAGE_BUCKET,
                name="mercad-logs-archive",
                is_public=False,
                tags=frozenset({"logs", "archived"}),
            ),
        ]


class JSONInventoryProvider(InventoryProvider):
    """Load asset records from a JSON file for offline scans"""

    def __init__(self, path: str, strict: bool = True):
        self.path = Path(path)
        self.strict = strict
        self.rejected: List[AssetError] = []

    def _load(self) -> Any:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise InventoryError(f"Inventory file not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise InventoryError(f"Inventory file {self.path} is not valid JSON: {e}") from e
        except OSError as e:
            raise InventoryError(f"Could not read inventory file {self.path}: {e}") from e

    def fetch_assets(self) -> List[Asset]:
        data = self._load()
        if isinstance(data, dict):
            data = data.get("assets")
        if not isinstance(data, list):
            raise InventoryError(
                f"Inventory file {self.path} must contain a list of assets"
            )

        logger.info(f"Loaded {len(data)} asset records from {self.path}")
        self.rejected = []
        assets = []
        for index, record in enumerate(data):
            try:
                assets.append(Asset.from_dict(record))
            except InvalidAssetError as e:
                if self.strict:
                    raise
                asset_id = e.asset_id or f"record[{index}]"
                logger.error(f"Rejected inventory record {asset_id}: {e}")
                self.rejected.append(AssetError(asset_id=asset_id, message=str(e)))
        return assets


class AWSInventoryProvider(InventoryProvider):
    """Build an inventory of S3 buckets and EC2 instances with boto3

    Credentials come from boto3's default chain or a named profile.
    """

    PUBLIC_GRANTEES = ('AllUsers', 'AuthenticatedUsers')

    def __init__(self, region: str = 'us-east-1', profile: str = None,
                 session: boto3.Session = None):
        self.region = region
        self.profile = profile
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        if session is not None:
            self.session = session
        else:
            self.session = self._initialize_session()

    def _initialize_session(self) -> boto3.Session:
        """Initialize boto3 session from a profile or the default chain"""
        try:
            if self.profile:
                return boto3.Session(profile_name=self.profile, region_name=self.region)
            return boto3.Session(region_name=self.region)
        except BotoCoreError as e:
            raise InventoryError(f"Failed to initialize AWS session: {e}") from e

    def fetch_assets(self) -> List[Asset]:
        assets = []
        assets.extend(self._discover_buckets())
        assets.extend(self._discover_instances())
        self.logger.info(f"Discovered {len(assets)} assets in {self.region}")
        return assets

    @staticmethod
    def _tag_values(tag_set: List[Dict[str, str]]) -> Set[str]:
        tags = set()
        for tag in tag_set or []:
            value = (tag.get('Value') or '').strip().lower()
            tags.add(value or (tag.get('Key') or '').strip().lower())
        tags.discard('')
        return tags

    def _discover_buckets(self) -> List[Asset]:
        s3_client = self.session.client('s3', region_name=self.region)
        try:
            buckets = s3_client.list_buckets().get('Buckets', [])
        except (ClientError, BotoCoreError) as e:
            raise InventoryError(f"Failed to list S3 buckets: {e}") from e

        assets = []
        for bucket in buckets:
            bucket_name = bucket['Name']
            assets.append(Asset(
                id=f"arn:aws:s3:::{bucket_name}",
                type=AssetType.STORAGE_BUCKET,
                name=bucket_name,
                is_public=self._bucket_is_public(s3_client, bucket_name),
                tags=frozenset(self._bucket_tags(s3_client, bucket_name)),
            ))
        return assets

    def _bucket_is_public(self, s3_client, bucket_name: str) -> bool:
        try:
            block = s3_client.get_public_access_block(Bucket=bucket_name)
            config = block.get('PublicAccessBlockConfiguration', {})
            if config.get('IgnorePublicAcls') and config.get('RestrictPublicBuckets'):
                return False
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) != 'NoSuchPublicAccessBlockConfiguration':
                self.logger.warning(f"Could not read public access block for {bucket_name}: {e}")

        try:
            status = s3_client.get_bucket_policy_status(Bucket=bucket_name)
            if status.get('PolicyStatus', {}).get('IsPublic'):
                return True
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) != 'NoSuchBucketPolicy':
                self.logger.warning(f"Could not read policy status for {bucket_name}: {e}")

        try:
            acl = s3_client.get_bucket_acl(Bucket=bucket_name)
        except (ClientError, BotoCoreError) as e:
            self.logger.warning(f"Could not read ACL for {bucket_name}: {e}")
            return False

        for grant in acl.get('Grants', []):
            grantee = grant.get('Grantee', {})
            if grantee.get('Type') == 'Group':
                uri = grantee.get('URI', '')
                if any(group in uri for group in self.PUBLIC_GRANTEES):
                    return True
        return False

    def _bucket_tags(self, s3_client, bucket_name: str) -> Set[str]:
        try:
            response = s3_client.get_bucket_tagging(Bucket=bucket_name)
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) != 'NoSuchTagSet':
                self.logger.warning(f"Could not read tags for {bucket_name}: {e}")
            return set()
        return self._tag_values(response.get('TagSet', []))

    def _discover_instances(self) -> List[Asset]:
        ec2_client = self.session.client('ec2', region_name=self.region)
        assets = []
        try:
            paginator = ec2_client.get_paginator('describe_instances')
            for page in paginator.paginate():
                for reservation in page['Reservations']:
                    for instance in reservation['Instances']:
                        if instance['State']['Name'] in ['terminated', 'terminating']:
                            continue
                        tags = instance.get('Tags', [])
                        name = next((tag['Value'] for tag in tags if tag.get('Key') == 'Name'),
                                    instance['InstanceId'])
                        assets.append(Asset(
                            id=instance['InstanceId'],
                            type=AssetType.VM_INSTANCE,
                            name=name,
                            is_public=instance.get('PublicIpAddress') is not None,
                            tags=frozenset(self._tag_values(
                                [tag for tag in tags if tag.get('Key') != 'Name']
                            )),
                        ))
        except (ClientError, BotoCoreError) as e:
            raise InventoryError(f"Failed to describe EC2 instances: {e}") from e
        return assets


def create_provider(config: ScanConfig) -> InventoryProvider:
    """Build the inventory provider selected by the scan configuration"""
    if config.source == "json":
        return JSONInventoryProvider(config.inventory_file, strict=config.strict)
    if config.source == "aws":
        return AWSInventoryProvider(region=config.region, profile=config.profile)
    return MockInventoryProvider()
