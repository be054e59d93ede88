# meydan/core/setup_guide.py
"""
백엔드가 준비되지 않았을 때 보여주는 설정 안내 문서.
컬렉션 구성과 보안 규칙은 클라이언트가 가정하는 권한 모델과 같아야 합니다.
- profiles: 누구나 읽기, 본인만 쓰기
- posts/likes/comments: 로그인한 사용자 읽기, 본인 소유 문서만 생성/수정/삭제
- media 버킷: 누구나 읽기, 로그인한 사용자만 쓰기
"""

COLLECTIONS = {
    'profiles': ['id', 'name', 'avatar_url', 'updated_at'],
    'posts': ['id', 'user_id', 'content', 'media_url', 'media_type', 'created_at', 'updated_at'],
    'likes': ['id', 'user_id', 'post_id', 'created_at'],
    'comments': ['id', 'user_id', 'post_id', 'text', 'created_at'],
}

FIRESTORE_RULES = """rules_version = '2';
service cloud.firestore {
  match /databases/{database}/documents {
    function signedIn() { return request.auth != null; }
    function ownsNew() { return signedIn() && request.resource.data.user_id == request.auth.uid; }
    function ownsExisting() { return signedIn() && resource.data.user_id == request.auth.uid; }

    match /profiles/{userId} {
      allow read: if true;
      allow write: if signedIn() && request.auth.uid == userId;
    }
    match /posts/{postId} {
      allow read: if signedIn();
      allow create: if ownsNew();
      allow update, delete: if ownsExisting();
    }
    match /likes/{likeId} {
      allow read: if signedIn();
      allow create: if ownsNew() && likeId == request.auth.uid + '_' + request.resource.data.post_id;
      allow delete: if ownsExisting();
    }
    match /comments/{commentId} {
      allow read: if signedIn();
      allow create: if ownsNew() && request.resource.data.text.size() > 0;
    }
  }
}
"""

STORAGE_RULES = """rules_version = '2';
service firebase.storage {
  match /b/{bucket}/o {
    match /{userId}/{fileName} {
      allow read: if true;
      allow write: if request.auth != null;
    }
  }
}
"""

STEPS = [
    "Firebase 콘솔에서 Cloud Firestore 데이터베이스(default)를 생성합니다.",
    "Firestore 규칙 탭에 firestore_rules 내용을 붙여넣고 게시합니다.",
    "Storage 버킷을 만들고 FIREBASE_STORAGE_BUCKET 에 이름을 설정합니다.",
    "Storage 규칙 탭에 storage_rules 내용을 붙여넣고 게시합니다.",
    "완료 후 POST /api/feed/setup/complete 로 피드를 다시 불러옵니다.",
]


def setup_guide() -> dict:
    return {
        "collections": COLLECTIONS,
        "firestore_rules": FIRESTORE_RULES,
        "storage_rules": STORAGE_RULES,
        "steps": STEPS,
    }
