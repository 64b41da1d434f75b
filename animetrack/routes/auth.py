from fastapi import APIRouter, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from fastapi import Depends
from ..schemas.users import RegisterIn, TokenOut, MeOut
from ..crud import create_user, authenticate_user

router = APIRouter()


@router.post('/register', response_model=MeOut)
async def register(payload: RegisterIn):
    return await create_user(payload)


@router.post('/login', response_model=TokenOut)
async def login(form: OAuth2PasswordRequestForm = Depends()):
    # the form's "username" field carries the email
    token = await authenticate_user(form.username, form.password)
    if not token:
        raise HTTPException(status_code=401, detail='Invalid credentials')
    return token
