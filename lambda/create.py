import os
import json
import uuid
from decimal import Decimal
import boto3

dynamodb = boto3.resource('dynamodb')
table = dynamodb.Table(os.environ['TABLE_NAME'])
primary_key = os.environ['PRIMARY_KEY']

def decimal_default(value):
    # DynamoDB hands numbers back as Decimal
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f'{type(value).__name__} is not JSON serializable')

def main(event, context):
    if not event.get('body'):
        return {
            'statusCode': 400,
            'body': json.dumps({'message': 'invalid request, you are missing the parameter body'})
        }

    try:
        item = json.loads(event['body'], parse_float=Decimal)
    except json.JSONDecodeError:
        return {
            'statusCode': 400,
            'body': json.dumps({'message': 'invalid request, body is not valid JSON'})
        }
    if not isinstance(item, dict):
        return {
            'statusCode': 400,
            'body': json.dumps({'message': 'invalid request, body must be a JSON object'})
        }

    item[primary_key] = str(uuid.uuid4())
    table.put_item(Item=item)

    return {
        'statusCode': 201,
        'body': json.dumps(item, default=decimal_default)
    }
