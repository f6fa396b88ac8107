"""Service identity stamped on every log line."""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'booking-platform')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # ECS metadata URI looks like http://169.254.170.2/v4/{task_id}-{timestamp}
    metadata_uri = os.getenv('ECS_CONTAINER_METADATA_URI_V4', '')
    if metadata_uri:
        instance = metadata_uri.rstrip('/').split('/')[-1].split('-')[0][:8] or 'ecs'
    else:
        instance = str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
