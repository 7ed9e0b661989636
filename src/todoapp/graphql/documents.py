"""GraphQL documents used against the Hasura data service."""

# ==================== USERS ====================

CREATE_USER = """
mutation CreateUser($id: String!, $email: String!) {
  insert_users_one(object: {id: $id, email: $email}) {
    id
    email
  }
}
"""

# ==================== TODOS ====================

GET_TODOS = """
query GetTodos($userId: String!) {
  todos(where: {user_id: {_eq: $userId}}, order_by: {created_at: desc}) {
    id
    user_id
    title
    description
    is_completed
    created_at
    updated_at
  }
}
"""

ADD_TODO = """
mutation AddTodo($userId: String!, $title: String!, $description: String!) {
  insert_todos_one(object: {user_id: $userId, title: $title, description: $description}) {
    id
    user_id
    title
    description
    is_completed
    created_at
    updated_at
  }
}
"""

# Only the keys present in $changes are written; updated_at is evaluated server side.
UPDATE_TODO = """
mutation UpdateTodo($id: uuid!, $userId: String!, $changes: todos_set_input!) {
  update_todos(where: {id: {_eq: $id}, user_id: {_eq: $userId}}, _set: $changes) {
    returning {
      id
      user_id
      title
      description
      is_completed
      created_at
      updated_at
    }
  }
}
"""

DELETE_TODO = """
mutation DeleteTodo($id: uuid!, $userId: String!) {
  delete_todos(where: {id: {_eq: $id}, user_id: {_eq: $userId}}) {
    returning {
      id
    }
  }
}
"""

# ==================== REFERRALS ====================

GET_REFERRALS_BY_REFERRER = """
query GetReferral($referrerId: String!) {
  referrals(where: {referrer_id: {_eq: $referrerId}}) {
    referrer_id
    referral_code
    referred_id
  }
}
"""

GET_REFERRER = """
query GetReferrer($referralCode: String!) {
  referrals(where: {referral_code: {_eq: $referralCode}}) {
    referrer_id
    referral_code
    referred_id
  }
}
"""

ADD_REFERRAL = """
mutation AddReferral($referrerId: String!, $referralCode: String!) {
  insert_referrals(objects: {referrer_id: $referrerId, referral_code: $referralCode}) {
    returning {
      referrer_id
      referral_code
      referred_id
    }
  }
}
"""

REDEEM_REFERRAL = """
mutation RedeemReferral($referralCode: String!, $referredId: String!) {
  update_referrals(
    where: {referral_code: {_eq: $referralCode}, referred_id: {_is_null: true}},
    _set: {referred_id: $referredId}
  ) {
    affected_rows
  }
}
"""
