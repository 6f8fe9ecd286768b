import os
import json
import boto3

dynamodb = boto3.resource('dynamodb')
table = dynamodb.Table(os.environ['TABLE_NAME'])
primary_key = os.environ['PRIMARY_KEY']
item_parameter = os.environ.get('ITEM_PARAMETER', 'id')

def main(event, context):
    request_id = (event.get('pathParameters') or {}).get(item_parameter)
    if not request_id:
        return {
            'statusCode': 400,
            'body': json.dumps({'message': f'invalid request, you are missing the path parameter {item_parameter}'})
        }

    table.delete_item(Key={primary_key: request_id})

    return {
        'statusCode': 200,
        'body': json.dumps({'message': 'deleted', primary_key: request_id})
    }
