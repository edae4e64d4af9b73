"""
Lambda function to fan a push notification out to all of a user's devices.
Triggered by API Gateway (POST /push).
"""

import json
import os
import logging
from typing import Dict, Any, List
import boto3
import httpx
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Initialize AWS clients
dynamodb = boto3.resource('dynamodb')
subscriptions_table = dynamodb.Table(os.environ.get('DYNAMODB_TABLE_PUSH_SUBSCRIPTIONS', 'push_subscriptions'))

# Push time-to-live in seconds
PUSH_TTL = os.environ.get('PUSH_TTL', '86400')

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
    'Content-Type': 'application/json'
}


def build_payload(title: str, body: str, tag: str = None, data: Dict[str, Any] = None) -> Dict[str, Any]:
    """Build the payload the notification agent receives on each device."""
    return {
        'title': title,
        'body': body,
        'icon': '/favicon.ico',
        'badge': '/favicon.ico',
        'tag': tag or 'notification',
        'data': data or {'url': '/dashboard'},
        'actions': [
            {'action': 'open', 'title': 'View'},
            {'action': 'dismiss', 'title': 'Dismiss'}
        ]
    }


def send_web_push(subscription: Dict[str, Any], payload: Dict[str, Any]) -> bool:
    """POST a payload to one subscription endpoint. Never raises."""
    try:
        response = httpx.post(
            subscription['endpoint'],
            headers={'Content-Type': 'application/json', 'TTL': PUSH_TTL},
            content=json.dumps(payload),
            timeout=30.0
        )
        logger.info(f"Push response status: {response.status_code}")
        return response.is_success
    except Exception as e:
        logger.error(f"Error sending push notification: {e}")
        return False


def get_subscriptions(user_id: str) -> List[Dict[str, Any]]:
    """Fetch every push subscription registered for a user."""
    response = subscriptions_table.query(
        KeyConditionExpression=Key('user_id').eq(user_id)
    )
    return response.get('Items', [])


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': CORS_HEADERS,
        'body': json.dumps(body)
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Send a push notification to all subscribed devices of a user.

    Body: {userId, title, body, tag?, data?}
    """
    if event.get('httpMethod') == 'OPTIONS':
        return {'statusCode': 200, 'headers': CORS_HEADERS, 'body': ''}

    try:
        request = json.loads(event.get('body') or '{}')
    except ValueError:
        return _response(400, {'error': 'Request body must be JSON'})
    if not isinstance(request, dict):
        return _response(400, {'error': 'Request body must be a JSON object'})

    user_id = request.get('userId')
    title = request.get('title')
    body = request.get('body')
    logger.info(f"Received push notification request for user {user_id}")

    if not user_id or not title or not body:
        return _response(400, {'error': 'Missing required fields: userId, title, body'})

    try:
        subscriptions = get_subscriptions(user_id)
    except ClientError as e:
        logger.error(f"Error fetching subscriptions: {e}", exc_info=True)
        return _response(500, {'error': 'Failed to fetch push subscriptions'})

    if not subscriptions:
        logger.info(f"No push subscriptions found for user: {user_id}")
        return _response(200, {'success': False, 'message': 'No push subscriptions found for user'})

    logger.info(f"Found {len(subscriptions)} subscription(s) for user")

    payload = build_payload(title, body, request.get('tag'), request.get('data'))
    sent = sum(1 for sub in subscriptions if send_web_push(sub, payload))

    logger.info(f"Successfully sent {sent}/{len(subscriptions)} push notifications")
    return _response(200, {'success': True, 'sent': sent, 'total': len(subscriptions)})
