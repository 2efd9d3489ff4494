"""User directory backed by a Cognito user pool and a DynamoDB table."""
